"""Container engine access: capability interface, Docker CLI backend, local transport."""

from aiodock.engine.base import ContainerEngine, EngineError
from aiodock.engine.docker import DockerEngine
from aiodock.engine.shell import make_run_cmd, make_write_file

__all__ = [
    "ContainerEngine",
    "DockerEngine",
    "EngineError",
    "make_run_cmd",
    "make_write_file",
]
