"""Steadfast v1.0 — CLI entry point."""

import logging
import sys

from steadfast import generate_report, load_events, predict_risk

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    events, now = load_events(sys.argv[1] if len(sys.argv) > 1 else "sample_events.json")
    print(generate_report(predict_risk(events, now=now)))
