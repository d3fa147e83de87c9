import asyncio
import json
import os

import websockets
from dotenv import load_dotenv

load_dotenv()

# Where the dashboard API is running (uvicorn coindash.main:app)
WS_URL = os.getenv("DASHBOARD_WS_URL", "ws://127.0.0.1:8000/ws")
UPDATES = int(os.getenv("WATCH_UPDATES", "20"))


async def main():
    async with websockets.connect(WS_URL, ping_interval=20, ping_timeout=20) as ws:
        print("Connected to:", WS_URL)

        for i in range(UPDATES):
            try:
                raw = await asyncio.wait_for(ws.recv(), timeout=15)
            except asyncio.TimeoutError:
                print(i + 1, "NO_UPDATE_IN_15S (is the poller running?)")
                break

            view = json.loads(raw)
            panel = next((p for p in view["panels"] if p["visible"]), None)
            if panel is None:
                print(i + 1, "NO_ACTIVE_PANEL")
                continue

            points = len(panel["chart"]["values"])
            print(i + 1, panel["ticker"], panel["price_text"], f"points={points}", f"history={panel['history']['status']}")


if __name__ == "__main__":
    asyncio.run(main())
