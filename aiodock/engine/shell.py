"""Local transport: run shell commands and write files on this host."""

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

DRY_RUN_RESULT = (0, "", "")
FAILED_RESULT = (1, "", "")


def _decode(data) -> str:
    return data.decode(errors="replace") if data else ""


async def _tee(pipe, level) -> str:
    """Log every line read from pipe at level and return them joined."""
    collected = []
    async for raw in pipe:
        line = _decode(raw).rstrip("\n")
        logger.log(level, line)
        collected.append(line)
    return "\n".join(collected)


async def _run_logged(proc):
    stdout, stderr, _ = await asyncio.gather(
        _tee(proc.stdout, logging.INFO),
        _tee(proc.stderr, logging.ERROR),
        proc.wait(),
    )
    return proc.returncode, stdout, stderr


async def _run_captured(proc, capture):
    out, err = await proc.communicate()
    if not capture:
        return proc.returncode, "", ""
    return proc.returncode, _decode(out), _decode(err)


def make_run_cmd(dry_run=False):
    """Create a run_cmd callable for local execution.

    run_cmd(command, stream=True, timeout=600, log_output=False, cwd=None)
    returns (returncode, stdout, stderr). stream=True lets output go
    straight to the terminal; log_output=True routes it through logging
    and also returns it. It never raises: spawn errors and timeouts are
    logged and reported as FAILED_RESULT.
    """

    async def run_cmd(command, stream=True, timeout=600, log_output=False, cwd=None):
        if dry_run:
            logger.info(f"[dry-run] {command}")
            return DRY_RUN_RESULT

        logger.debug(f"$ {command}")
        piped = log_output or not stream
        try:
            proc = await asyncio.create_subprocess_shell(
                command,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE if piped else None,
                stderr=asyncio.subprocess.PIPE if piped else None,
            )
        except OSError as e:
            logger.error(f"Error running command: {e}")
            return FAILED_RESULT

        work = _run_logged(proc) if log_output else _run_captured(proc, capture=not stream)
        try:
            return await asyncio.wait_for(work, timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Command timed out after {timeout}s: {command}")
            proc.kill()
            await proc.wait()
            return FAILED_RESULT

    return run_cmd


def make_write_file(base_dir, dry_run=False):
    """Create a write_file(path, content, mode=None) callable.

    Relative paths land in base_dir; absolute paths (Traefik's dynamic
    config directory) are written where they point.
    """

    async def write_file(path, content, mode=None):
        target = path if os.path.isabs(path) else os.path.join(base_dir, path)
        if dry_run:
            logger.info(f"[dry-run] write {target}")
            return
        parent = os.path.dirname(target)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(target, "w") as f:
            f.write(content)
        if mode is not None:
            os.chmod(target, mode)

    return write_file
