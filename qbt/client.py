# qbt/client.py - session client for the qBittorrent Web API v2
import json
import logging

import httpx

from .exceptions import AuthenticationError, RequestFailedError, ResponseParseError
from .marshal import Target, build_request, join_values, omit_falsy, resolve_target

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


async def connect(host: str, username: str, password: str, *, timeout: float = DEFAULT_TIMEOUT,
                  transport: httpx.AsyncBaseTransport | None = None) -> "QBittorrentClient":
    """
    Logs in to the WebUI and returns a client bound to the session cookie.

    Args:
        host: hostname, hostname:port or full URL of the WebUI
        username: WebUI username
        password: WebUI password
        timeout: httpx timeout applied to every request
        transport: optional httpx transport, handed to every per-call AsyncClient

    Raises:
        AuthenticationError: the login was refused or the host was unreachable.
            The underlying error is kept as __cause__.
    """
    target = resolve_target(host)
    request = build_request(target, "/auth/login", {"username": username, "password": password})

    try:
        async with httpx.AsyncClient(transport=transport, timeout=timeout) as client:
            response = await client.send(request)
    except httpx.TransportError as e:
        raise AuthenticationError(username, f"could not reach {target.origin}: {e}") from e

    logger.debug("POST /auth/login -> %s", response.status_code)
    if response.status_code != 200:
        raise AuthenticationError(username, f"HTTP {response.status_code}") from RequestFailedError(
            "/auth/login", response.status_code
        )

    # qBittorrent answers "Fails." with a 200 and no cookie for bad credentials
    set_cookies = response.headers.get_list("set-cookie")
    if not set_cookies:
        raise AuthenticationError(username, f"no session cookie, server said {response.text.strip()!r}")

    # The raw header keeps server order; response.cookies is a jar keyed by name
    cookie = set_cookies[0].split(";", 1)[0].strip()
    return QBittorrentClient(target, cookie, timeout=timeout, transport=transport)


class QBittorrentClient:
    """
    One method per WebUI endpoint. Every call is a single POST on its own
    connection, carrying the session cookie obtained by connect().

    Optional arguments that are None, empty, False or 0 are not sent at all.
    """

    def __init__(self, target: Target, cookie: str, *, timeout: float = DEFAULT_TIMEOUT,
                 transport: httpx.AsyncBaseTransport | None = None):
        self._target = target
        self._cookie = cookie
        self._timeout = timeout
        self._transport = transport

    @property
    def target(self) -> Target:
        return self._target

    @property
    def cookie(self) -> str:
        return self._cookie

    def __repr__(self):
        return f"QBittorrentClient({self._target.origin!r})"

    async def _post(self, path: str, parameters: dict | None = None) -> httpx.Response:
        request = build_request(self._target, path, parameters, self._cookie)
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.send(request)

        logger.debug("POST %s -> %s", path, response.status_code)
        if response.status_code != 200:
            raise RequestFailedError(path, response.status_code)
        return response

    async def _call(self, path: str, parameters: dict | None = None) -> None:
        await self._post(path, parameters)

    async def _text(self, path: str, parameters: dict | None = None) -> str:
        response = await self._post(path, parameters)
        return response.text

    async def _json(self, path: str, parameters: dict | None = None):
        response = await self._post(path, parameters)
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(path, response.text) from e

    # --- Authentication ---

    async def logout(self) -> None:
        """Invalidates the session cookie on the server side."""
        await self._call("/auth/logout")

    # --- Application ---

    async def app_version(self) -> str:
        """Returns the application version, e.g. v4.1.3"""
        return await self._text("/app/version")

    async def api_version(self) -> str:
        """Returns the WebAPI version, e.g. 2.0"""
        return await self._text("/app/webapiVersion")

    async def build_info(self) -> dict:
        """Returns qt, libtorrent, boost, openssl and bitness versions."""
        return await self._json("/app/buildInfo")

    async def shutdown(self) -> None:
        await self._call("/app/shutdown")

    async def preferences(self) -> dict:
        return await self._json("/app/preferences")

    async def set_preferences(self, preferences: dict) -> None:
        """Only the keys present in `preferences` are changed."""
        await self._call("/app/setPreferences", {"json": json.dumps(preferences)})

    async def default_save_path(self) -> str:
        return await self._text("/app/defaultSavePath")

    # --- Log ---

    async def main_log(self, normal: bool = None, info: bool = None, warning: bool = None,
                       critical: bool = None, last_known_id: int = None) -> list:
        """
        Returns log entries newer than last_known_id.

        The server includes every severity unless told otherwise, and a False
        here is not sent, so the severity filters can only be switched on.
        """
        return await self._json("/log/main", omit_falsy(
            normal=normal, info=info, warning=warning, critical=critical, last_known_id=last_known_id,
        ))

    async def peer_log(self, last_known_id: int = None) -> list:
        return await self._json("/log/peers", omit_falsy(last_known_id=last_known_id))

    # --- Sync ---

    async def maindata(self, rid: int = None) -> dict:
        """Returns the full state (rid 0) or the changes since response id `rid`."""
        return await self._json("/sync/maindata", omit_falsy(rid=rid))

    async def torrent_peers(self, hash: str, rid: int = None) -> dict:
        return await self._json("/sync/torrentPeers", {"hash": hash, **omit_falsy(rid=rid)})

    # --- Transfer ---

    async def transfer_info(self) -> dict:
        """Global speeds, totals and connection status."""
        return await self._json("/transfer/info")

    async def speed_limits_mode(self) -> str:
        """Returns "1" if alternative speed limits are enabled, "0" otherwise."""
        return await self._text("/transfer/speedLimitsMode")

    async def toggle_speed_limits_mode(self) -> None:
        await self._call("/transfer/toggleSpeedLimitsMode")

    async def global_download_limit(self) -> str:
        """Global download limit in bytes/s, "0" when unlimited."""
        return await self._text("/transfer/downloadLimit")

    async def set_global_download_limit(self, limit: int) -> None:
        await self._call("/transfer/setDownloadLimit", {"limit": limit})

    async def global_upload_limit(self) -> str:
        return await self._text("/transfer/uploadLimit")

    async def set_global_upload_limit(self, limit: int) -> None:
        await self._call("/transfer/setUploadLimit", {"limit": limit})

    async def ban_peers(self, peers: str | list[str]) -> None:
        """Bans peers given as host:port."""
        await self._call("/transfer/banPeers", {"peers": join_values(peers, "|")})

    # --- Torrent management ---

    async def torrents(self, filter: str = None, category: str = None, sort: str = None,
                       reverse: bool = None, limit: int = None, offset: int = None,
                       hashes: str | list[str] = None) -> list:
        """
        Returns the torrent list.

        Args:
            filter: all, downloading, completed, paused, active, inactive, ...
            category: only torrents in this category
            sort: field to sort by, e.g. "name" or "added_on"
            reverse: reverse the sort order
            limit: maximum number of torrents returned
            offset: skip this many torrents (negative counts from the end)
            hashes: only these torrents
        """
        return await self._json("/torrents/info", omit_falsy(
            filter=filter, category=category, sort=sort, reverse=reverse,
            limit=limit, offset=offset, hashes=join_values(hashes, "|"),
        ))

    async def properties(self, hash: str) -> dict:
        """Generic properties of one torrent (save path, ratio, seeding time, ...)."""
        return await self._json("/torrents/properties", {"hash": hash})

    async def trackers(self, hash: str) -> list:
        return await self._json("/torrents/trackers", {"hash": hash})

    async def webseeds(self, hash: str) -> list:
        return await self._json("/torrents/webseeds", {"hash": hash})

    async def files(self, hash: str) -> list:
        """Returns the file list of one torrent."""
        return await self._json("/torrents/files", {"hash": hash})

    async def piece_states(self, hash: str) -> list:
        """0 = not downloaded, 1 = downloading, 2 = downloaded, one entry per piece."""
        return await self._json("/torrents/pieceStates", {"hash": hash})

    async def piece_hashes(self, hash: str) -> list:
        return await self._json("/torrents/pieceHashes", {"hash": hash})

    async def pause_torrents(self, hashes: str | list[str]) -> None:
        """Pass "all" to pause every torrent."""
        await self._call("/torrents/pause", {"hashes": join_values(hashes, "|")})

    async def resume_torrents(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/resume", {"hashes": join_values(hashes, "|")})

    async def delete_torrents(self, hashes: str | list[str], delete_files: bool = False) -> None:
        """Removes torrents, and their downloaded data when delete_files is set."""
        await self._call("/torrents/delete", {
            "hashes": join_values(hashes, "|"),
            "deleteFiles": bool(delete_files),
        })

    async def recheck_torrents(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/recheck", {"hashes": join_values(hashes, "|")})

    async def reannounce_torrents(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/reannounce", {"hashes": join_values(hashes, "|")})

    async def add_torrent(self, urls: str | list[str], savepath: str = None, cookie: str = None,
                          category: str = None, tags: str | list[str] = None, skip_checking: bool = None,
                          paused: bool = None, root_folder: bool = None, rename: str = None,
                          up_limit: int = None, dl_limit: int = None, auto_tmm: bool = None,
                          sequential_download: bool = None, first_last_piece_prio: bool = None) -> str:
        """
        Adds torrents from URLs or magnet links.

        Returns the server's reply text, "Ok." on success and "Fails." when
        nothing could be added.
        """
        parameters = {"urls": join_values(urls, "\n")}
        parameters.update(omit_falsy(
            savepath=savepath,
            cookie=cookie,
            category=category,
            tags=join_values(tags, ","),
            skip_checking=skip_checking,
            paused=paused,
            root_folder=root_folder,
            rename=rename,
            upLimit=up_limit,
            dlLimit=dl_limit,
            autoTMM=auto_tmm,
            sequentialDownload=sequential_download,
            firstLastPiecePrio=first_last_piece_prio,
        ))
        return await self._text("/torrents/add", parameters)

    async def add_trackers(self, hash: str, urls: str | list[str]) -> None:
        await self._call("/torrents/addTrackers", {"hash": hash, "urls": join_values(urls, "\n")})

    async def edit_tracker(self, hash: str, orig_url: str, new_url: str) -> None:
        await self._call("/torrents/editTracker", {"hash": hash, "origUrl": orig_url, "newUrl": new_url})

    async def remove_trackers(self, hash: str, urls: str | list[str]) -> None:
        await self._call("/torrents/removeTrackers", {"hash": hash, "urls": join_values(urls, "|")})

    async def increase_priority(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/increasePrio", {"hashes": join_values(hashes, "|")})

    async def decrease_priority(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/decreasePrio", {"hashes": join_values(hashes, "|")})

    async def top_priority(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/topPrio", {"hashes": join_values(hashes, "|")})

    async def bottom_priority(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/bottomPrio", {"hashes": join_values(hashes, "|")})

    async def set_file_priority(self, hash: str, ids: int | str | list[int], priority: int) -> None:
        """priority: 0 do not download, 1 normal, 6 high, 7 maximal."""
        if isinstance(ids, int):
            ids = [ids]
        await self._call("/torrents/filePrio", {
            "hash": hash,
            "id": join_values(ids, "|"),
            "priority": priority,
        })

    async def torrents_download_limit(self, hashes: str | list[str]) -> dict:
        """Maps each hash to its download limit in bytes/s."""
        return await self._json("/torrents/downloadLimit", {"hashes": join_values(hashes, "|")})

    async def set_torrents_download_limit(self, hashes: str | list[str], limit: int) -> None:
        await self._call("/torrents/setDownloadLimit", {"hashes": join_values(hashes, "|"), "limit": limit})

    async def torrents_upload_limit(self, hashes: str | list[str]) -> dict:
        return await self._json("/torrents/uploadLimit", {"hashes": join_values(hashes, "|")})

    async def set_torrents_upload_limit(self, hashes: str | list[str], limit: int) -> None:
        await self._call("/torrents/setUploadLimit", {"hashes": join_values(hashes, "|"), "limit": limit})

    async def set_share_limits(self, hashes: str | list[str], ratio_limit: float, seeding_time_limit: int) -> None:
        """-2 uses the global limit, -1 means no limit."""
        await self._call("/torrents/setShareLimits", {
            "hashes": join_values(hashes, "|"),
            "ratioLimit": ratio_limit,
            "seedingTimeLimit": seeding_time_limit,
        })

    async def set_location(self, hashes: str | list[str], location: str) -> None:
        await self._call("/torrents/setLocation", {"hashes": join_values(hashes, "|"), "location": location})

    async def rename_torrent(self, hash: str, name: str) -> None:
        await self._call("/torrents/rename", {"hash": hash, "name": name})

    async def rename_file(self, hash: str, old_path: str, new_path: str) -> None:
        await self._call("/torrents/renameFile", {"hash": hash, "oldPath": old_path, "newPath": new_path})

    async def set_auto_management(self, hashes: str | list[str], enable: bool) -> None:
        await self._call("/torrents/setAutoManagement", {"hashes": join_values(hashes, "|"), "enable": bool(enable)})

    async def toggle_sequential_download(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/toggleSequentialDownload", {"hashes": join_values(hashes, "|")})

    async def toggle_first_last_piece_priority(self, hashes: str | list[str]) -> None:
        await self._call("/torrents/toggleFirstLastPiecePrio", {"hashes": join_values(hashes, "|")})

    async def set_force_start(self, hashes: str | list[str], value: bool) -> None:
        await self._call("/torrents/setForceStart", {"hashes": join_values(hashes, "|"), "value": bool(value)})

    async def set_super_seeding(self, hashes: str | list[str], value: bool) -> None:
        await self._call("/torrents/setSuperSeeding", {"hashes": join_values(hashes, "|"), "value": bool(value)})

    # --- Categories & tags ---

    async def set_category(self, hashes: str | list[str], category: str) -> None:
        """An empty category removes the torrents from their category."""
        await self._call("/torrents/setCategory", {"hashes": join_values(hashes, "|"), "category": category or ""})

    async def categories(self) -> dict:
        """Returns categories keyed by name, each with name and savePath."""
        return await self._json("/torrents/categories")

    async def create_category(self, category: str, save_path: str = None) -> None:
        await self._call("/torrents/createCategory", {"category": category, **omit_falsy(savePath=save_path)})

    async def edit_category(self, category: str, save_path: str) -> None:
        await self._call("/torrents/editCategory", {"category": category, "savePath": save_path or ""})

    async def remove_categories(self, categories: str | list[str]) -> None:
        await self._call("/torrents/removeCategories", {"categories": join_values(categories, "\n")})

    async def add_tags(self, hashes: str | list[str], tags: str | list[str]) -> None:
        await self._call("/torrents/addTags", {"hashes": join_values(hashes, "|"), "tags": join_values(tags, ",")})

    async def remove_tags(self, hashes: str | list[str], tags: str | list[str] = None) -> None:
        """Without tags, every tag is removed from the torrents."""
        await self._call("/torrents/removeTags", {
            "hashes": join_values(hashes, "|"),
            **omit_falsy(tags=join_values(tags, ",")),
        })

    async def tags(self) -> list:
        return await self._json("/torrents/tags")

    async def create_tags(self, tags: str | list[str]) -> None:
        await self._call("/torrents/createTags", {"tags": join_values(tags, ",")})

    async def delete_tags(self, tags: str | list[str]) -> None:
        await self._call("/torrents/deleteTags", {"tags": join_values(tags, ",")})
