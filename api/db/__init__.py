"""Database helpers (engine/sessionmaker export)."""

from .session import Base, get_engine, get_sessionmaker, make_engine, make_sessionmaker

__all__ = ["Base", "get_engine", "get_sessionmaker", "make_engine", "make_sessionmaker"]
