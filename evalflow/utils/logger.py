#!filepath: evalflow/utils/logger.py
from __future__ import annotations

import os
import sys
from functools import wraps
from time import perf_counter
from typing import Any, Callable, Optional

from loguru import logger

_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"


class Logging:
    """
    Workflow logging handle
    ---------------------------------------
    - thin wrapper over loguru
    - optional daily rotating file sink
    - bind(**extra) -> per-invocation handle
    - catch() decorator: log + re-raise
    ---------------------------------------
    """

    def __init__(
        self,
        log_dir: Optional[str] = None,
        rotation: str = "1 day",
        retention: str = "30 days",
        log_level: str = "INFO",
        configure: bool = True,
        _logger=None,
        _extra: Optional[dict] = None,
    ):
        self.log_dir = log_dir
        self.rotation = rotation
        self.retention = retention
        self.level = log_level
        self._logger = _logger if _logger is not None else logger
        self._extra = dict(_extra or {})

        if configure:
            self._configure()

    def _configure(self) -> None:
        """
        Replace loguru sinks: stderr + (optional) file.
        """
        logger.remove()

        logger.add(sys.stderr, level=self.level, format=_FORMAT)

        if self.log_dir:
            os.makedirs(self.log_dir, exist_ok=True)
            logger.add(
                sink=f"{self.log_dir}/{{time:YYYY-MM-DD}}.log",
                rotation=self.rotation,
                retention=self.retention,
                level=self.level,
                format=_FORMAT,
                enqueue=True,  # 多进程安全
                backtrace=True,
                diagnose=True,
            )

        logger.info("-----------Logger initialized successfully.-----------")

    # ---------- handle ----------
    def bind(self, **extra: Any) -> "Logging":
        """
        Return a handle whose records carry ``extra``.

        Sinks stay shared; only the record context differs, so a
        workflow run can hold its own handle without reconfiguring loguru.
        """
        return Logging(
            log_dir=self.log_dir,
            rotation=self.rotation,
            retention=self.retention,
            log_level=self.level,
            configure=False,
            _logger=self._logger.bind(**extra),
            _extra={**self._extra, **extra},
        )

    @property
    def extra(self) -> dict:
        return dict(self._extra)

    def __reduce__(self):
        # loguru sinks (stderr, files) stay in this process; a worker gets
        # an unconfigured handle over its own loguru, bound to the same extra
        return (
            _rebind,
            (self.log_dir, self.rotation, self.retention, self.level, self._extra),
        )

    # ----------- 日志方法 -----------
    def debug(self, msg: str, *args, **kwargs):
        self._logger.opt(depth=1).debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._logger.opt(depth=1).info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._logger.opt(depth=1).warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._logger.opt(depth=1).error(msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self._logger.opt(depth=1, exception=True).error(msg, *args, **kwargs)

    # ---------- 日志装饰器 ----------
    def catch(
        self,
        msg: str = "Exception occurred",
        log_time: bool = True,
    ) -> Callable:

        def decorator(func: Callable):
            @wraps(func)
            def wrapper(*args, **kwargs):
                start = perf_counter()

                try:
                    result = func(*args, **kwargs)
                except Exception:
                    self._logger.exception(f"[ERROR] {func.__name__}: {msg}")
                    raise

                if log_time:
                    cost = perf_counter() - start
                    self._logger.info(f"[TIME] {func.__name__} took {cost:.4f}s")

                return result

            return wrapper

        return decorator


def _rebind(log_dir, rotation, retention, level, extra) -> Logging:
    return Logging(
        log_dir=log_dir,
        rotation=rotation,
        retention=retention,
        log_level=level,
        configure=False,
        _logger=logger.bind(**extra),
        _extra=extra,
    )


def init_logging(cfg) -> Logging:
    """
    Configure loguru from a LogConfig and swap the module-level ``logs``.
    """
    global logs
    logs = Logging(
        log_dir=cfg.dir,
        rotation=cfg.rotation,
        retention=cfg.retention,
        log_level=cfg.level,
    )
    return logs


# 默认全局 logs（可被 init_logging 替换）; importing never touches sinks
logs = Logging(configure=False)
