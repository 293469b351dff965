"""
Checkpoint backends.

Runs are checkpointed by LangGraph: the graph is compiled with a
checkpointer and every superstep is saved under `configurable.thread_id`.
A store only decides which saver backs a run and which backend failures
count as checkpoint failures.

    memory  -> MemorySaver, threads live as long as the process
    sqlite  -> AsyncSqliteSaver on a SQLite file, one connection per run
"""

import logging
import os
import sqlite3
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from langgraph.checkpoint.base import BaseCheckpointSaver
from langgraph.checkpoint.memory import MemorySaver
from langgraph.checkpoint.sqlite.aio import AsyncSqliteSaver

from tripgraph.shared.exceptions import CheckpointError


logger = logging.getLogger(__name__)


class CheckpointStore(ABC):
    """Source of the LangGraph checkpointer used while a run executes."""

    @abstractmethod
    def open(self) -> AsyncIterator[BaseCheckpointSaver]:
        """Async context manager yielding a ready checkpointer."""

    def as_checkpoint_error(self, thread_id: str, error: BaseException) -> Optional[CheckpointError]:
        """CheckpointError for a backend failure, None for anything else."""
        if isinstance(error, CheckpointError):
            return error
        return None


class InMemoryCheckpointStore(CheckpointStore):
    """Process-local threads for development and tests."""

    def __init__(self, saver: Optional[MemorySaver] = None):
        self.saver = saver or MemorySaver()

    @asynccontextmanager
    async def open(self) -> AsyncIterator[BaseCheckpointSaver]:
        yield self.saver


class SqliteCheckpointStore(CheckpointStore):
    """Threads persisted to a SQLite file through aiosqlite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    @asynccontextmanager
    async def open(self) -> AsyncIterator[BaseCheckpointSaver]:
        async with AsyncSqliteSaver.from_conn_string(self.db_path) as saver:
            yield saver

    def as_checkpoint_error(self, thread_id: str, error: BaseException) -> Optional[CheckpointError]:
        if isinstance(error, sqlite3.Error):
            return CheckpointError(thread_id, f"{type(error).__name__}: {error}")
        return super().as_checkpoint_error(thread_id, error)


def create_checkpoint_store(backend: str, path: Optional[str] = None) -> CheckpointStore:
    if backend == "sqlite":
        if not path:
            raise ValueError("sqlite checkpoint backend requires a path")
        logger.info(f"Using SQLite checkpointer at {path}")
        return SqliteCheckpointStore(path)
    return InMemoryCheckpointStore()
