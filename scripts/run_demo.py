"""Run the demo control loop from a source checkout: python scripts/run_demo.py [config.yaml]"""
import sys, pathlib
ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))
from trendstate.bootstrap.main import run_app
if __name__ == "__main__":
    cfg = sys.argv[1] if len(sys.argv) > 1 else str(ROOT / "configs" / "demo.yaml")
    for res in run_app(config_path=cfg):
        print(f"{res.trend.value:<6} confidence={res.confidence:>3} features={tuple(res.features)}")
