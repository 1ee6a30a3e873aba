from __future__ import annotations

import argparse

from trendstate.bootstrap.main import run_app


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="trendstate", description="Run a trendstate control loop.")
    parser.add_argument("config", help="path to the YAML config")
    args = parser.parse_args(argv)
    run_app(config_path=args.config)


if __name__ == "__main__":
    main()
