import os
import sys

# Add repo root to Python import path so `import coindash...` works
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import asyncio

from coindash.dashboard.controller import Dashboard
from coindash.providers.loader import get_provider, get_search_provider
from coindash.view.render import render_view


async def main():
    """
    One polling round + the active coin's history against the live APIs.
    """
    dashboard = Dashboard(get_provider(), get_search_provider())
    try:
        dashboard.poller.poll_round()
        dashboard.history.schedule(dashboard.active_coin)
        await dashboard.wait_idle()

        view = render_view(dashboard)
        for panel in view.panels:
            print(f"{panel.ticker:>5} {panel.price_text}  error={panel.error}")

        active = next(p for p in view.panels if p.visible)
        print(f"\n{active.name} history: {active.history.status}")
        for row in active.history.rows:
            print(f"  {row.date}  open={row.open}  close={row.close}")
    finally:
        await dashboard.aclose()


if __name__ == "__main__":
    asyncio.run(main())
