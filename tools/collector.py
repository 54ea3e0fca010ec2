"""
Local TCP collector for development.

Accepts line-framed analytics sessions and prints each line, flagging
anything that is not a standalone JSON object.

    python tools/collector.py --port 9999
"""

import argparse
import asyncio
import json


async def handle_client(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    peer = writer.get_extra_info("peername")
    print(f"[{peer}] connected")

    lines = 0
    bad = 0
    while True:
        raw = await reader.readline()
        if not raw:
            break
        lines += 1
        text = raw.decode("utf-8", errors="replace").rstrip("\n")
        try:
            obj = json.loads(text)
        except json.JSONDecodeError as e:
            bad += 1
            print(f"[{peer}] INVALID ({e}): {text}")
            continue
        if not isinstance(obj, dict):
            bad += 1
            print(f"[{peer}] NOT AN OBJECT: {text}")
            continue
        print(f"[{peer}] {obj.get('eventName', '?')}: {text}")

    print(f"[{peer}] disconnected after {lines} lines ({bad} invalid)")
    writer.close()
    await writer.wait_closed()


async def serve(host: str, port: int) -> None:
    server = await asyncio.start_server(handle_client, host, port)
    addrs = ", ".join(str(sock.getsockname()) for sock in server.sockets)
    print(f"collector listening on {addrs}")
    async with server:
        await server.serve_forever()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print analytics lines received over TCP.")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=9999)
    args = parser.parse_args()

    try:
        asyncio.run(serve(args.host, args.port))
    except KeyboardInterrupt:
        pass
