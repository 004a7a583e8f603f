# scripts/test/check_dashboards.py
"""Call every dashboard endpoint of a running backend and print a one-line summary each."""

import argparse
import requests

DEFAULT_BACKEND = "http://localhost:8080/api/v1"


def _get(base, path, api_key, **params):
    headers = {"X-API-Key": api_key} if api_key else {}
    resp = requests.get(f"{base}{path}", params=params, headers=headers, timeout=30)
    resp.raise_for_status()
    return resp.json()


def check_utilization(base, api_key):
    data = _get(base, "/dashboard/utilization", api_key)
    u = data["utilization"]
    print(f"✅ utilization: {len(u['departmentUtilization'])} departments, "
          f"{len(u['redistributionSuggestions'])} suggestions, {len(u['top10IdleAssets'])} idle, "
          f"avg={data['stats']['avgUtilization']}%")


def check_protection(base, api_key, time_range):
    data = _get(base, "/dashboard/protection", api_key, timeRange=time_range)
    m = data["metrics"]
    print(f"✅ protection[{time_range}]: {m['violationsThisMonth']} violations (month), "
          f"{len(data['activeAlerts'])} active alerts, {len(data['movementPatterns'])} patterns, "
          f"compliance={m['complianceScore']}%")


def check_compliance(base, api_key):
    data = _get(base, "/dashboard/compliance", api_key)
    s = data["summary"]
    buckets = ", ".join(f"{b['level']}={b['count']}" for b in s["riskDistribution"])
    print(f"✅ compliance: score={s['overallScore']}% nonCompliant={s['nonCompliant']} ({buckets}), "
          f"{len(data['assetRisks'])} asset risks")


def check_trends(base, api_key):
    vis = _get(base, "/dashboard/visibility", api_key, range="week")
    acc = _get(base, "/maintenance/trend", api_key)
    print(f"✅ trends: visibility {len(vis['trend'])} points, accuracy avg={acc['summary']['avgAccuracy']}% "
          f"({acc['summary']['trend']})")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Smoke-check the analytics dashboards")
    parser.add_argument("--url", default=DEFAULT_BACKEND)
    parser.add_argument("--api-key", default=None)
    parser.add_argument("--time-range", default="24h", choices=["1h", "24h", "7d", "30d"])
    args = parser.parse_args()

    try:
        check_utilization(args.url, args.api_key)
        check_protection(args.url, args.api_key, args.time_range)
        check_compliance(args.url, args.api_key)
        check_trends(args.url, args.api_key)
    except requests.exceptions.ConnectionError:
        print(f"❌ Backend unreachable at {args.url}")
    except requests.exceptions.HTTPError as e:
        print(f"❌ {e}")
