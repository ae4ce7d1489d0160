"""toolrpc — JSON-RPC 2.0 dispatcher for filesystem and shell tools."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from toolrpc.config import DispatcherSettings as DispatcherSettings
    from toolrpc.config import SettingsLoader as SettingsLoader
    from toolrpc.defaults import create_default_dispatcher as create_default_dispatcher
    from toolrpc.defaults import create_dispatcher as create_dispatcher
    from toolrpc.defaults import create_dispatcher_from_settings as create_dispatcher_from_settings
    from toolrpc.defaults import create_plain_to_wrapped_dispatcher as create_plain_to_wrapped_dispatcher
    from toolrpc.defaults import create_wrapped_dispatcher as create_wrapped_dispatcher
    from toolrpc.defaults import create_wrapped_to_plain_dispatcher as create_wrapped_to_plain_dispatcher
    from toolrpc.dispatcher import Dispatcher as Dispatcher
    from toolrpc.registry import ToolRegistry as ToolRegistry
    from toolrpc.transform import FormatConfig as FormatConfig
    from toolrpc.transform import FormatTransformer as FormatTransformer
    from toolrpc.transform import WireFormat as WireFormat

_EXPORTS = {
    "DispatcherSettings": "toolrpc.config",
    "SettingsLoader": "toolrpc.config",
    "create_default_dispatcher": "toolrpc.defaults",
    "create_dispatcher": "toolrpc.defaults",
    "create_dispatcher_from_settings": "toolrpc.defaults",
    "create_plain_to_wrapped_dispatcher": "toolrpc.defaults",
    "create_wrapped_dispatcher": "toolrpc.defaults",
    "create_wrapped_to_plain_dispatcher": "toolrpc.defaults",
    "Dispatcher": "toolrpc.dispatcher",
    "ToolRegistry": "toolrpc.registry",
    "FormatConfig": "toolrpc.transform",
    "FormatTransformer": "toolrpc.transform",
    "WireFormat": "toolrpc.transform",
}


def __getattr__(name: str) -> object:
    module_path = _EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'toolrpc' has no attribute {name!r}")
