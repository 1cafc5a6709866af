from __future__ import annotations

import logging
import shutil
import subprocess
import sys

from mlbv.errors import PlayerError

logger = logging.getLogger(__name__)


def system_opener() -> list[str]:
    if sys.platform.startswith("win"):
        return ["cmd", "/C", "start", ""]
    if sys.platform == "darwin":
        return ["open"]
    return ["xdg-open"]


def resolve_media_player(media_player: str | None) -> list[str]:
    if media_player:
        path = shutil.which(media_player)
        if path:
            logger.debug("Found %s at %s", media_player, path)
            return [path]
        logger.warning("Command %s not found in PATH", media_player)
    logger.warning("No valid media player configured; falling back to system default player")
    return system_opener()


def play_stream_url(url: str, media_player: str | None = None) -> None:
    cmd = resolve_media_player(media_player) + [url]
    logger.info("Launching %s", cmd[0])
    try:
        proc = subprocess.run(cmd, check=False)
    except OSError as e:
        raise PlayerError(f"Could not start {cmd[0]}: {e}") from e
    if proc.returncode != 0:
        raise PlayerError(f"Media player exited with status {proc.returncode}")


def handle_playback_url(url: str, print_url: bool, media_player: str | None = None) -> None:
    if print_url:
        print(url)
        return
    play_stream_url(url, media_player)
