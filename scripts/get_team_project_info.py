"""
Description: 打印当前 API Key 可见的用户、团队、工作流状态与标签
Usage:
    uv run scripts/get_team_project_info.py

    用于初次配置 .env：从输出中挑选 LINEAR_TEAM_ID / LINEAR_PROJECT_ID。
    需要先在 .env 中配置 LINEAR_API_KEY。
"""

import asyncio
import logging
import sys

from linear_agent.core.config import settings
from linear_agent.core.graphql_client import get_graphql_client
from linear_agent.providers.linear.linear_provider import LinearProvider

logging.basicConfig(
    level=settings.get_log_level(),
    format="%(levelname)s: %(message)s",
    stream=sys.stderr,
)


async def main():
    try:
        client = get_graphql_client()
    except ValueError as e:
        print(f"\nError: {e}\n", file=sys.stderr)
        sys.exit(1)

    provider = LinearProvider(client)
    try:
        user = (await provider.get_current_user())["viewer"]
        print("\n=== Linear Account ===")
        print(f"User: {user['name']} <{user['email']}>")

        teams = (await provider.get_teams())["teams"]["nodes"]
        print("\n=== Teams ===")
        for team in teams:
            print(f"- {team['name']} ({team['key']}): {team['id']}")
            for state in team.get("states", {}).get("nodes", []):
                print(f"    state  {state['name']:<16} {state['id']}")
            for label in team.get("labels", {}).get("nodes", []):
                print(f"    label  {label['name']:<16} {label['id']}")

        if settings.LINEAR_PROJECT_ID:
            project = (await provider.get_project(settings.LINEAR_PROJECT_ID))["project"]
            print("\n=== Project (LINEAR_PROJECT_ID) ===")
            print(f"{project['name']}: {project['url']}")

        if teams:
            print("\n# .env 示例")
            print(f"LINEAR_TEAM_ID={teams[0]['id']}")
    finally:
        await client.close()


if __name__ == "__main__":
    asyncio.run(main())
