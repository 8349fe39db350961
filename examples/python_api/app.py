from __future__ import annotations

import argparse
from pathlib import Path

from grafana_apps.client.options import WatchOptions
from grafana_apps.config import apply, engine_from_config, load
from grafana_apps.core.context import CallContext
from grafana_apps.resources.dashboard import DashboardResource


def _progress(change: object, event: str) -> None:
    address = getattr(change, "address", "unknown")
    if event == "start":
        print(f"[apply:start] {address}")
    else:
        print(f"[apply:done]  {address}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply grafana-apps config via Python API")
    parser.add_argument("--config", default="grafana-apps.yaml", help="Path to config file")
    parser.add_argument("--overwrite", action="store_true", help="Skip version checks")
    parser.add_argument(
        "--watch",
        type=float,
        metavar="SECONDS",
        help="Print dashboard events for this many seconds after applying",
    )
    args = parser.parse_args()

    config = load(Path(args.config))
    result = apply(config, overwrite=args.overwrite, progress=_progress)
    print("Apply summary:", result.summary())

    if args.watch:
        engine = engine_from_config(config)
        client = engine.handler_for(DashboardResource.resource_type).client
        ctx = CallContext(timeout=args.watch)
        stream = client.watch(ctx, WatchOptions(timeout_seconds=int(args.watch)))
        try:
            for event in stream:
                print(f"{event.type.value:8} {getattr(event.object, 'metadata', None)}")
        finally:
            stream.close()


if __name__ == "__main__":
    main()
