"""Read-only process table lookups and the nsenter shell hand-off."""
from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import NoReturn
from typing import Sequence

import psutil

from .errors import EntityNotFound
from .errors import TransportError

logger = logging.getLogger(__name__)

_ATTRS = [
    "pid",
    "name",
    "status",
    "cpu_percent",
    "memory_info",
    "create_time",
    "cmdline",
    "ppid",
    "exe",
]


@dataclass(frozen=True)
class ProcessRecord:
    pid: int
    name: str
    status: str
    cpu_percent: float
    rss_kb: int
    vms_kb: int
    start_time: int
    run_time: int
    cmdline: tuple[str, ...]
    parent_pid: int | None
    exe: str | None = None

    @classmethod
    def from_process(cls, proc: psutil.Process, *, now: float | None = None) -> "ProcessRecord":
        info = proc.as_dict(attrs=_ATTRS, ad_value=None)
        memory = info.get("memory_info")
        created = info.get("create_time") or 0.0
        current = time.time() if now is None else now
        return cls(
            pid=info["pid"],
            name=info.get("name") or "",
            status=info.get("status") or "unknown",
            cpu_percent=info.get("cpu_percent") or 0.0,
            rss_kb=(memory.rss // 1024) if memory else 0,
            vms_kb=(memory.vms // 1024) if memory else 0,
            start_time=int(created),
            run_time=max(0, int(current - created)) if created else 0,
            cmdline=tuple(info.get("cmdline") or ()),
            parent_pid=info.get("ppid"),
            exe=info.get("exe") or None,
        )


def find_by_name(name: str) -> list[ProcessRecord]:
    """Every process whose name contains ``name``."""
    records: list[ProcessRecord] = []
    for proc in psutil.process_iter(["name"]):
        proc_name = proc.info.get("name") or ""
        if name not in proc_name:
            continue
        try:
            records.append(ProcessRecord.from_process(proc))
        except psutil.NoSuchProcess:
            logger.debug("Process %s exited during inspection", proc.pid)
    if not records:
        raise EntityNotFound(f"No process matching name '{name}'")
    return records


def find_by_pid(pid: int) -> ProcessRecord:
    try:
        return ProcessRecord.from_process(psutil.Process(pid))
    except psutil.NoSuchProcess as exc:
        raise EntityNotFound(f"Process {pid} not found") from exc


def format_record(record: ProcessRecord) -> str:
    lines = [
        f"PID:             {record.pid}",
        f"Name:            {record.name}",
        f"Status:          {record.status}",
        f"CPU:             {record.cpu_percent:.2f}%",
        f"Memory RSS:      {record.rss_kb} KB",
        f"Virtual Mem:     {record.vms_kb} KB",
        f"Start (epoch):   {record.start_time}",
        f"Run time (sec):  {record.run_time}",
        f"Exe path:        {record.exe or '(unavailable)'}",
        f"Cmd line:        {list(record.cmdline)}",
        f"Parent PID:      {record.parent_pid if record.parent_pid is not None else '(none)'}",
        "-" * 36,
    ]
    return "\n".join(lines)


def default_shell() -> str:
    return "/bin/bash" if os.path.exists("/bin/bash") else "/bin/sh"


def nsenter_command(pid: int, shell: str | None = None) -> list[str]:
    return ["sudo", "nsenter", "-t", str(pid), "-a", shell or default_shell()]


def enter_shell(pid: int, shell: str | None = None) -> NoReturn:
    """Replace this process with a root shell inside ``pid``'s namespaces."""
    command = nsenter_command(pid, shell)
    logger.info("Entering namespaces of %s: %s", pid, command)
    _exec(command)


def _exec(command: Sequence[str]) -> NoReturn:
    try:
        os.execvp(command[0], list(command))
    except OSError as exc:
        raise TransportError(command, exc) from exc
