import asyncio
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from shared.common_utils.logger import logger
from .errors import CommandExecutionError

CONFIG_LS_PREFIX = "config ls"
CONFIG_HELP_PREFIX = "config help"


@dataclass(frozen=True)
class CommandDescriptor:
    """A monitor command: its prefix, keyed arguments and output format."""

    prefix: str
    args: Dict[str, str] = field(default_factory=dict)
    format: str = "json"

    def to_json(self) -> str:
        return json.dumps({"prefix": self.prefix, **self.args, "format": self.format})

    @property
    def normalized_prefix(self) -> str:
        return self.prefix.replace(" ", "_")


def config_ls_command() -> CommandDescriptor:
    return CommandDescriptor(prefix=CONFIG_LS_PREFIX)


def config_help_command(name: str) -> CommandDescriptor:
    # 'config help' takes the parameter under 'key', not 'name'
    return CommandDescriptor(prefix=CONFIG_HELP_PREFIX, args={"key": name})


class CommandExecutor(ABC):
    """Runs a command against the cluster and returns its raw reply."""

    @abstractmethod
    async def execute(self, command: CommandDescriptor) -> bytes:
        """Return the raw reply or raise CommandExecutionError."""


class CephCliExecutor(CommandExecutor):
    """Executes monitor commands through the ``ceph`` command line tool."""

    def __init__(
        self,
        binary: str = "ceph",
        base_args: Sequence[str] = (),
        timeout: Optional[float] = 30.0,
    ):
        self.binary = binary
        self.base_args = list(base_args)
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "CephCliExecutor":
        return cls(
            binary=settings.CEPH_BINARY,
            base_args=settings.ceph_base_args,
            timeout=settings.COMMAND_TIMEOUT,
        )

    def build_argv(self, command: CommandDescriptor) -> List[str]:
        return [
            self.binary,
            *self.base_args,
            *command.prefix.split(),
            *command.args.values(),
            "--format",
            command.format,
        ]

    async def execute(self, command: CommandDescriptor) -> bytes:
        cmd = command.to_json()
        argv = self.build_argv(command)
        logger.debug(f"Executing cluster command {cmd}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise CommandExecutionError(f"Could not start '{self.binary}': {e}", command=cmd) from e

        try:
            async with asyncio.timeout(self.timeout):
                stdout, stderr = await process.communicate()
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise CommandExecutionError(
                f"Command timed out after {self.timeout}s", command=cmd
            ) from e
        except asyncio.CancelledError:
            process.kill()
            raise

        status = stderr.decode(errors="replace").strip()
        if process.returncode != 0:
            logger.error(f"Cluster command {cmd} exited with {process.returncode}: {status}")
            raise CommandExecutionError(
                f"Command exited with code {process.returncode}", command=cmd, status=status
            )
        if status:
            logger.info(f"Cluster command {cmd} executed with status: {status}")
        logger.debug(f"Cluster command {cmd} returned {len(stdout)} bytes")
        return stdout


def _encode_reply(reply: Any) -> bytes:
    if isinstance(reply, bytes):
        return reply
    if isinstance(reply, str):
        return reply.encode()
    return json.dumps(reply).encode()


class MockCommandExecutor(CommandExecutor):
    """
    Canned replies for tests and for running without a cluster.

    ``responses`` is keyed by normalized prefix (``config_ls``),
    ``detail_responses`` by parameter name for ``config help``. Prefixes or
    parameter names listed in ``failing`` raise CommandExecutionError.
    """

    def __init__(
        self,
        responses: Optional[Dict[str, Any]] = None,
        detail_responses: Optional[Dict[str, Any]] = None,
        failing: Iterable[str] = (),
    ):
        self.responses: Dict[str, Any] = dict(responses or {})
        self.detail_responses: Dict[str, Any] = dict(detail_responses or {})
        self.failing = set(failing)
        self.calls: List[CommandDescriptor] = []

    @classmethod
    def from_directory(cls, path: Union[str, Path]) -> "MockCommandExecutor":
        """
        Load replies from ``<path>/<prefix>.json`` and ``<path>/config_help/<name>.json``.
        """
        base = Path(path)
        if not base.is_dir():
            raise CommandExecutionError(f"Mock data directory {base} does not exist")
        responses = {reply.stem: reply.read_bytes() for reply in base.glob("*.json")}
        help_dir = base / "config_help"
        detail_responses = {}
        if help_dir.is_dir():
            detail_responses = {reply.stem: reply.read_bytes() for reply in help_dir.glob("*.json")}
        logger.info(
            f"Mock executor loaded {len(responses)} command replies and "
            f"{len(detail_responses)} parameter details from {base}"
        )
        return cls(responses=responses, detail_responses=detail_responses)

    @property
    def detail_calls(self) -> List[str]:
        return [c.args["key"] for c in self.calls if c.prefix == CONFIG_HELP_PREFIX]

    async def execute(self, command: CommandDescriptor) -> bytes:
        self.calls.append(command)
        cmd = command.to_json()

        if command.prefix == CONFIG_HELP_PREFIX:
            name = command.args.get("key", "")
            if name in self.failing:
                raise CommandExecutionError(f"Injected failure for parameter '{name}'", command=cmd)
            if name not in self.detail_responses:
                raise CommandExecutionError(f"Unknown parameter '{name}'", command=cmd, status="ENOENT")
            return _encode_reply(self.detail_responses[name])

        prefix = command.normalized_prefix
        if prefix in self.failing:
            raise CommandExecutionError(f"Injected failure for command '{prefix}'", command=cmd)
        if prefix not in self.responses:
            raise CommandExecutionError(f"Unknown monitor command prefix: {prefix}", command=cmd)
        return _encode_reply(self.responses[prefix])


def build_executor(settings) -> CommandExecutor:
    """Select the executor named by ``settings.EXECUTOR``."""
    kind = settings.EXECUTOR.lower()
    if kind == "mock":
        if settings.MOCK_DATA_DIR:
            return MockCommandExecutor.from_directory(settings.MOCK_DATA_DIR)
        return MockCommandExecutor()
    if kind == "ceph":
        return CephCliExecutor.from_settings(settings)
    raise ValueError(f"Unsupported executor '{settings.EXECUTOR}'. Use 'ceph' or 'mock'.")
