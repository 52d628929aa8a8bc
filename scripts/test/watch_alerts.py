# scripts/test/watch_alerts.py
"""
Stay connected to the push channel as one user at a fixed position and print
the proximity alerts that user would see.

  python scripts/test/watch_alerts.py --user bob --password secret --lat 48.8576 --lon 2.3522

Alerts auto-expire after ALERT_TIMEOUT_SECONDS. Ctrl+C to stop.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

import argparse
import asyncio

import requests

from app.client.alert_manager import AlertLifecycleManager
from app.client.location import LastKnownLocation
from app.client.proximity import ProximityEvaluator
from app.client.push_client import IncidentFeedClient


def login(api_url, username, password):
    resp = requests.post(f"{api_url}/login", json={"username": username, "password": password}, timeout=10)
    resp.raise_for_status()
    body = resp.json()
    return body["user"]["id"], body["token"]


async def watch(args):
    user_id, token = login(args.url, args.user, args.password)
    location = LastKnownLocation()
    location.update(args.lat, args.lon)

    alerts = AlertLifecycleManager(
        on_display=lambda a: print(f"🚨 {a.type.upper()} {a.distance:.0f} m away ({a.location}) {a.comment or ''}"),
        on_close=lambda a, outcome: print(f"   incident {a.incident_id} alert {outcome.value}"),
    )
    feed = IncidentFeedClient(
        args.ws, user_id, token,
        ProximityEvaluator(user_id, location.current, radius_meters=args.radius),
        alerts,
        on_incident=lambda e: print(f"📥 {e.type.value} #{e.incident.id} ({e.incident.type})"),
    )
    print(f"👀 Watching as user {user_id} at ({args.lat}, {args.lon}), radius {args.radius:.0f} m")
    try:
        await feed.run()
    finally:
        await alerts.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Print proximity alerts for one user")
    parser.add_argument("--url", default="http://localhost:8080/api")
    parser.add_argument("--ws", default="ws://localhost:8080/ws")
    parser.add_argument("--user", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--lat", type=float, required=True)
    parser.add_argument("--lon", type=float, required=True)
    parser.add_argument("--radius", type=float, default=5000.0)
    args = parser.parse_args()

    try:
        asyncio.run(watch(args))
    except KeyboardInterrupt:
        print("\n👋 Stopped")
