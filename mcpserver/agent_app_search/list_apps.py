# list_apps.py - 列出所有找到的应用
import sys
import asyncio
from typing import Dict, List

from .app_search_agent import create_app_search_agent

def format_items(response: Dict) -> List[str]:
    """把查询响应渲染为可打印的行"""
    if "items" not in response:
        return [f"Error: {response.get('subtitle', '')}"]

    lines = []
    for i, item in enumerate(response["items"], 1):
        lines.append(f"{i:2d}. {item['title']} - {item['subtitle']}")
        lines.append(f"     命令: {item['arg']}")
        if item.get("icon"):
            lines.append(f"     图标: {item['icon']}")
    return lines

async def list_all_apps(query: str = "") -> Dict:
    """列出匹配查询的应用"""
    agent = create_app_search_agent()
    response = await agent.execute(query)

    print("=== 找到的所有应用 ===")
    if "items" in response:
        print(f"总计: {len(response['items'])} 个应用\n")
    for line in format_items(response):
        print(line)

    return response

if __name__ == "__main__":
    asyncio.run(list_all_apps(" ".join(sys.argv[1:])))
