from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from .rtl.dictionary import DEFAULT_SSL_PATH


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


def _env_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    return Path(raw.strip()).expanduser()


@dataclass(frozen=True)
class DecoderConfig:
    ssl_path: Path = DEFAULT_SSL_PATH
    debug_decoder: bool = False
    fold_constants: bool = False


def load_decoder_config() -> DecoderConfig:
    ssl_path = _env_path("ST20_SSL_FILE")
    if ssl_path is None:
        ssl_path = DEFAULT_SSL_PATH
    elif not ssl_path.is_absolute():
        base = _env_path("ST20_SSL_DIR")
        ssl_path = (base or Path.cwd()) / ssl_path

    return DecoderConfig(
        ssl_path=ssl_path,
        debug_decoder=_env_flag("ST20_DEBUG_DECODER", default=False),
        fold_constants=_env_flag("ST20_FOLD_CONSTANTS", default=False),
    )


__all__ = ["DecoderConfig", "load_decoder_config"]
