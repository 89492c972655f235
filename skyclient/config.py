from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .container import DEFAULT_TIMEOUT, Container
from .platform import PlatformBundle, desktop_platform, web_platform
from .sso.popup import DEFAULT_POLL_INTERVAL

CONFIG_FILENAME = "skyclient.json"
STORE_FILENAME = "skyclient-store.json"


def default_config_dir() -> str:
    base = os.environ.get("LOCALAPPDATA") or os.environ.get("XDG_CONFIG_HOME") or os.path.expanduser("~/.config")
    return os.path.join(base, "skyclient")


def default_config_path() -> str:
    return os.path.join(default_config_dir(), CONFIG_FILENAME)


def default_store_path() -> str:
    return os.path.join(default_config_dir(), STORE_FILENAME)


def load_config(path: Optional[str]) -> Dict[str, Any]:
    p = (path or "").strip() or default_config_path()
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}
    except FileNotFoundError:
        return {}
    except (OSError, ValueError):
        return {}


def save_config(path: Optional[str], payload: Dict[str, Any]) -> None:
    p = (path or "").strip() or default_config_path()
    os.makedirs(os.path.dirname(p) or ".", exist_ok=True)

    tmp = p + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    os.replace(tmp, p)


@dataclass
class ClientConfig:
    api_key: Optional[str] = None
    end_point: Optional[str] = None
    timeout: Optional[float] = DEFAULT_TIMEOUT
    platform: str = "web"
    store_path: Optional[str] = None
    popup_poll_interval: float = DEFAULT_POLL_INTERVAL
    strict_popup_result: bool = False

    def build_platform(self) -> PlatformBundle:
        if self.platform == "web":
            return web_platform()
        if self.platform == "desktop":
            return desktop_platform(self.store_path or default_store_path())
        raise ValueError(f"unsupported platform: {self.platform}")


def _as_float(value: Any, default: Optional[float]) -> Optional[float]:
    if value is None or value == "":
        return default
    return float(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def get_config(path: Optional[str] = None) -> ClientConfig:
    """读取配置：环境变量优先，其次配置文件，最后默认值。"""

    config_path = path or os.environ.get("SKYCLIENT_CONFIG") or default_config_path()
    cfg = load_config(config_path)
    env = os.environ

    return ClientConfig(
        api_key=env.get("SKYCLIENT_API_KEY") or cfg.get("api_key"),
        end_point=env.get("SKYCLIENT_END_POINT") or cfg.get("end_point"),
        timeout=_as_float(env.get("SKYCLIENT_TIMEOUT") or cfg.get("timeout"), DEFAULT_TIMEOUT),
        platform=env.get("SKYCLIENT_PLATFORM") or cfg.get("platform") or "web",
        store_path=env.get("SKYCLIENT_STORE_PATH") or cfg.get("store_path"),
        popup_poll_interval=_as_float(cfg.get("popup_poll_interval"), DEFAULT_POLL_INTERVAL),
        strict_popup_result=_as_bool(cfg.get("strict_popup_result", False)),
    )


async def create_container(config: Optional[ClientConfig] = None, **kwargs: Any) -> Container:
    """按配置构造容器并完成 config()（恢复本地会话）。kwargs 透传给 Container，例如 transport。"""

    config = config or get_config()
    platform = config.build_platform()
    container = Container(platform=platform, timeout=config.timeout, **kwargs)
    return await container.config(api_key=config.api_key, end_point=config.end_point)


__all__ = [
    "ClientConfig",
    "default_config_path",
    "default_store_path",
    "load_config",
    "save_config",
    "get_config",
    "create_container",
]
