"""
Linear Agent 入口点

主进程运行 MCP Server（stdio，供 Cursor/Claude 调用），
子进程运行 HTTP 包装器（供 n8n 等调用）。stdout 只留给 MCP 协议。
"""

import logging
import multiprocessing
import sys

from linear_agent.core.config import settings
from linear_agent.http_server import main as run_http_server
from linear_agent.mcp_server import main as run_mcp_server

logger = logging.getLogger(__name__)

HTTP_STARTUP_TIMEOUT = 5.0
HTTP_SHUTDOWN_TIMEOUT = 1.0


def _http_worker(ready) -> None:
    """子进程入口：uvicorn.run 阻塞，就绪信号只能在启动前发出"""
    ready.set()
    try:
        run_http_server()
    except Exception as e:
        sys.stderr.write(f"HTTP Server process failed: {e}\n")


def start_http_process() -> multiprocessing.Process:
    ready = multiprocessing.Event()
    process = multiprocessing.Process(
        target=_http_worker, args=(ready,), name="Linear-HTTP-Server", daemon=True
    )
    process.start()

    if not ready.wait(timeout=HTTP_STARTUP_TIMEOUT) or not process.is_alive():
        logger.warning(
            "HTTP wrapper not ready on %s:%d, continuing with MCP only",
            settings.HTTP_HOST,
            settings.HTTP_PORT,
        )
    return process


def stop_process(process: multiprocessing.Process) -> None:
    if process.is_alive():
        process.terminate()
        process.join(timeout=HTTP_SHUTDOWN_TIMEOUT)


def main():
    if not settings.LINEAR_API_KEY:
        sys.stderr.write("LINEAR_API_KEY 未配置，请先在 .env 中设置\n")
        sys.exit(1)

    http_process = start_http_process()
    try:
        run_mcp_server()
    except KeyboardInterrupt:
        pass
    finally:
        stop_process(http_process)


if __name__ == "__main__":
    # spawn: 子进程不继承 Provider 的缓存与标签记忆
    multiprocessing.set_start_method("spawn", force=True)
    main()
