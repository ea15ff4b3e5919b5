"""
Action surface — one coroutine per protocol action.

Every action is ``POST /api/<action>`` with named parameters and returns the
unwrapped ``data`` dict. Parameters left as None are omitted from the body.
"""

from __future__ import annotations

from typing import Any, Optional

from milky_bridge.transport.http import HttpClient


class Internal:
    def __init__(self, http: HttpClient):
        self._http = http

    async def _call(self, action: str, **params: Any) -> dict[str, Any]:
        return await self._http.call(action, params)

    # --- system ---

    async def get_login_info(self) -> dict[str, Any]:
        """Get login info."""
        return await self._call("get_login_info")

    async def get_impl_info(self) -> dict[str, Any]:
        """Get protocol implementation info."""
        return await self._call("get_impl_info")

    async def get_user_profile(self, user_id: int) -> dict[str, Any]:
        return await self._call("get_user_profile", user_id=user_id)

    async def get_friend_list(self, no_cache: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("get_friend_list", no_cache=no_cache)

    async def get_friend_info(self, user_id: int, no_cache: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("get_friend_info", user_id=user_id, no_cache=no_cache)

    async def get_group_list(self, no_cache: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("get_group_list", no_cache=no_cache)

    async def get_group_info(self, group_id: int, no_cache: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("get_group_info", group_id=group_id, no_cache=no_cache)

    async def get_group_member_list(self, group_id: int, no_cache: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("get_group_member_list", group_id=group_id, no_cache=no_cache)

    async def get_group_member_info(
        self, group_id: int, user_id: int, no_cache: Optional[bool] = None,
    ) -> dict[str, Any]:
        return await self._call("get_group_member_info", group_id=group_id, user_id=user_id, no_cache=no_cache)

    async def get_cookies(self, domain: str) -> dict[str, Any]:
        return await self._call("get_cookies", domain=domain)

    async def get_csrf_token(self) -> dict[str, Any]:
        return await self._call("get_csrf_token")

    # --- messages ---

    async def send_private_message(self, user_id: int, message: list[dict[str, Any]]) -> dict[str, Any]:
        """Send a private message. Returns ``{message_seq, time, client_seq?}``."""
        return await self._call("send_private_message", user_id=user_id, message=message)

    async def send_group_message(self, group_id: int, message: list[dict[str, Any]]) -> dict[str, Any]:
        """Send a group message. Returns ``{message_seq, time}``."""
        return await self._call("send_group_message", group_id=group_id, message=message)

    async def get_message(self, message_scene: str, peer_id: int, message_seq: int) -> dict[str, Any]:
        """Get one message. Returns ``{message}``."""
        return await self._call("get_message", message_scene=message_scene, peer_id=peer_id, message_seq=message_seq)

    async def get_history_messages(
        self,
        message_scene: str,
        peer_id: int,
        start_message_seq: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        """Get messages older than ``start_message_seq``. Returns ``{messages, next_message_seq?}``."""
        return await self._call(
            "get_history_messages",
            message_scene=message_scene, peer_id=peer_id, start_message_seq=start_message_seq, limit=limit,
        )

    async def get_resource_temp_url(self, resource_id: str) -> dict[str, Any]:
        return await self._call("get_resource_temp_url", resource_id=resource_id)

    async def get_forwarded_messages(self, forward_id: str) -> dict[str, Any]:
        return await self._call("get_forwarded_messages", forward_id=forward_id)

    async def recall_private_message(self, user_id: int, message_seq: int) -> dict[str, Any]:
        return await self._call("recall_private_message", user_id=user_id, message_seq=message_seq)

    async def recall_group_message(self, group_id: int, message_seq: int) -> dict[str, Any]:
        return await self._call("recall_group_message", group_id=group_id, message_seq=message_seq)

    async def mark_message_as_read(self, message_scene: str, peer_id: int, message_seq: int) -> dict[str, Any]:
        return await self._call(
            "mark_message_as_read", message_scene=message_scene, peer_id=peer_id, message_seq=message_seq,
        )

    # --- friends ---

    async def send_friend_nudge(self, user_id: int, is_self: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("send_friend_nudge", user_id=user_id, is_self=is_self)

    async def send_profile_like(self, user_id: int, count: Optional[int] = None) -> dict[str, Any]:
        return await self._call("send_profile_like", user_id=user_id, count=count)

    async def get_friend_requests(
        self, limit: Optional[int] = None, is_filtered: Optional[bool] = None,
    ) -> dict[str, Any]:
        return await self._call("get_friend_requests", limit=limit, is_filtered=is_filtered)

    async def accept_friend_request(self, initiator_uid: str, is_filtered: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("accept_friend_request", initiator_uid=initiator_uid, is_filtered=is_filtered)

    async def reject_friend_request(
        self, initiator_uid: str, is_filtered: Optional[bool] = None, reason: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "reject_friend_request", initiator_uid=initiator_uid, is_filtered=is_filtered, reason=reason,
        )

    # --- groups ---

    async def set_group_name(self, group_id: int, new_group_name: str) -> dict[str, Any]:
        return await self._call("set_group_name", group_id=group_id, new_group_name=new_group_name)

    async def set_group_avatar(self, group_id: int, image_uri: str) -> dict[str, Any]:
        return await self._call("set_group_avatar", group_id=group_id, image_uri=image_uri)

    async def set_group_member_card(self, group_id: int, user_id: int, card: str) -> dict[str, Any]:
        return await self._call("set_group_member_card", group_id=group_id, user_id=user_id, card=card)

    async def set_group_member_special_title(self, group_id: int, user_id: int, special_title: str) -> dict[str, Any]:
        return await self._call(
            "set_group_member_special_title", group_id=group_id, user_id=user_id, special_title=special_title,
        )

    async def set_group_member_admin(
        self, group_id: int, user_id: int, is_set: Optional[bool] = None,
    ) -> dict[str, Any]:
        return await self._call("set_group_member_admin", group_id=group_id, user_id=user_id, is_set=is_set)

    async def set_group_member_mute(
        self, group_id: int, user_id: int, duration: Optional[int] = None,
    ) -> dict[str, Any]:
        """Mute a member for ``duration`` seconds; 0 unmutes."""
        return await self._call("set_group_member_mute", group_id=group_id, user_id=user_id, duration=duration)

    async def set_group_whole_mute(self, group_id: int, is_mute: Optional[bool] = None) -> dict[str, Any]:
        return await self._call("set_group_whole_mute", group_id=group_id, is_mute=is_mute)

    async def kick_group_member(
        self, group_id: int, user_id: int, reject_add_request: Optional[bool] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "kick_group_member", group_id=group_id, user_id=user_id, reject_add_request=reject_add_request,
        )

    async def get_group_announcement_list(self, group_id: int) -> dict[str, Any]:
        return await self._call("get_group_announcement_list", group_id=group_id)

    async def send_group_announcement(
        self, group_id: int, content: str, image_uri: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._call("send_group_announcement", group_id=group_id, content=content, image_uri=image_uri)

    async def delete_group_announcement(self, group_id: int, announcement_id: str) -> dict[str, Any]:
        return await self._call("delete_group_announcement", group_id=group_id, announcement_id=announcement_id)

    async def get_group_essence_messages(self, group_id: int, page_index: int, page_size: int) -> dict[str, Any]:
        return await self._call(
            "get_group_essence_messages", group_id=group_id, page_index=page_index, page_size=page_size,
        )

    async def set_group_essence_message(
        self, group_id: int, message_seq: int, is_set: Optional[bool] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "set_group_essence_message", group_id=group_id, message_seq=message_seq, is_set=is_set,
        )

    async def quit_group(self, group_id: int) -> dict[str, Any]:
        return await self._call("quit_group", group_id=group_id)

    async def send_group_message_reaction(
        self, group_id: int, message_seq: int, reaction: str, is_add: Optional[bool] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "send_group_message_reaction",
            group_id=group_id, message_seq=message_seq, reaction=reaction, is_add=is_add,
        )

    async def send_group_nudge(self, group_id: int, user_id: int) -> dict[str, Any]:
        return await self._call("send_group_nudge", group_id=group_id, user_id=user_id)

    async def get_group_notifications(
        self,
        start_notification_seq: Optional[int] = None,
        is_filtered: Optional[bool] = None,
        limit: Optional[int] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "get_group_notifications",
            start_notification_seq=start_notification_seq, is_filtered=is_filtered, limit=limit,
        )

    async def accept_group_request(
        self,
        notification_seq: int,
        notification_type: Optional[str] = None,
        group_id: Optional[int] = None,
        is_filtered: Optional[bool] = None,
    ) -> dict[str, Any]:
        """Accept a join request or an invited-join request."""
        return await self._call(
            "accept_group_request",
            notification_seq=notification_seq, notification_type=notification_type,
            group_id=group_id, is_filtered=is_filtered,
        )

    async def reject_group_request(
        self,
        notification_seq: int,
        notification_type: Optional[str] = None,
        group_id: Optional[int] = None,
        is_filtered: Optional[bool] = None,
        reason: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "reject_group_request",
            notification_seq=notification_seq, notification_type=notification_type,
            group_id=group_id, is_filtered=is_filtered, reason=reason,
        )

    async def accept_group_invitation(self, group_id: int, invitation_seq: int) -> dict[str, Any]:
        """Accept an invitation for the bot itself to join a group."""
        return await self._call("accept_group_invitation", group_id=group_id, invitation_seq=invitation_seq)

    async def reject_group_invitation(self, group_id: int, invitation_seq: int) -> dict[str, Any]:
        return await self._call("reject_group_invitation", group_id=group_id, invitation_seq=invitation_seq)

    # --- files ---

    async def upload_private_file(self, user_id: int, file_uri: str, file_name: str) -> dict[str, Any]:
        return await self._call("upload_private_file", user_id=user_id, file_uri=file_uri, file_name=file_name)

    async def upload_group_file(
        self, group_id: int, file_uri: str, file_name: str, parent_folder_id: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "upload_group_file",
            group_id=group_id, parent_folder_id=parent_folder_id, file_uri=file_uri, file_name=file_name,
        )

    async def get_private_file_download_url(self, user_id: int, file_id: str, file_hash: str) -> dict[str, Any]:
        """Returns ``{download_url}``."""
        return await self._call(
            "get_private_file_download_url", user_id=user_id, file_id=file_id, file_hash=file_hash,
        )

    async def get_group_file_download_url(self, group_id: int, file_id: str) -> dict[str, Any]:
        """Returns ``{download_url}``."""
        return await self._call("get_group_file_download_url", group_id=group_id, file_id=file_id)

    async def get_group_files(self, group_id: int, parent_folder_id: Optional[str] = None) -> dict[str, Any]:
        return await self._call("get_group_files", group_id=group_id, parent_folder_id=parent_folder_id)

    async def move_group_file(
        self,
        group_id: int,
        file_id: str,
        parent_folder_id: Optional[str] = None,
        target_folder_id: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "move_group_file",
            group_id=group_id, file_id=file_id,
            parent_folder_id=parent_folder_id, target_folder_id=target_folder_id,
        )

    async def rename_group_file(
        self, group_id: int, file_id: str, new_file_name: str, parent_folder_id: Optional[str] = None,
    ) -> dict[str, Any]:
        return await self._call(
            "rename_group_file",
            group_id=group_id, file_id=file_id, parent_folder_id=parent_folder_id, new_file_name=new_file_name,
        )

    async def delete_group_file(self, group_id: int, file_id: str) -> dict[str, Any]:
        return await self._call("delete_group_file", group_id=group_id, file_id=file_id)

    async def create_group_folder(self, group_id: int, folder_name: str) -> dict[str, Any]:
        return await self._call("create_group_folder", group_id=group_id, folder_name=folder_name)

    async def rename_group_folder(self, group_id: int, folder_id: str, new_folder_name: str) -> dict[str, Any]:
        return await self._call(
            "rename_group_folder", group_id=group_id, folder_id=folder_id, new_folder_name=new_folder_name,
        )

    async def delete_group_folder(self, group_id: int, folder_id: str) -> dict[str, Any]:
        return await self._call("delete_group_folder", group_id=group_id, folder_id=folder_id)
