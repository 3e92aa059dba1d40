from __future__ import annotations

from dataclasses import dataclass

from .exit_codes import ERR_COORDINATOR, ERR_INPUT, ERR_INTERNAL, ERR_LOCAL_IO, ERR_REMOTE


@dataclass
class ScriptError(Exception):
    message: str
    code: int = ERR_INTERNAL
    kind: str = "generic_error"
    step: str | None = None

    def __str__(self) -> str:
        if self.step:
            return f"step `{self.step}` failed: {self.message}"
        return self.message


@dataclass
class DiscoveryError(ScriptError):
    code: int = ERR_COORDINATOR
    kind: str = "discovery_error"


@dataclass
class TransferError(ScriptError):
    code: int = ERR_REMOTE
    kind: str = "transfer_error"


@dataclass
class RemoteExecError(ScriptError):
    code: int = ERR_REMOTE
    kind: str = "remote_exec_error"


@dataclass
class InputError(ScriptError):
    code: int = ERR_INPUT
    kind: str = "input_error"


@dataclass
class LocalIOError(ScriptError):
    code: int = ERR_LOCAL_IO
    kind: str = "local_io_error"
