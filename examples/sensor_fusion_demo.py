#!/usr/bin/env python3
"""
Sensor Fusion Demo
- Two sensor sources feeding one peak-picking transition
- A maintenance inhibitor that blocks fusion while it holds a token
- Readings forwarded to a printing exit
- Trace events written to the log
"""

import logging

from runpetri import NetController, LoggingTraceSink


NET = {
    "places": [
        {"id": "left_sensor", "kind": "source"},
        {"id": "right_sensor", "kind": "source"},
        {"id": "maintenance", "kind": "source", "inhibitLabel": "fuse"},
        {"id": "fused", "kind": "internal"},
        {"id": "display", "kind": "exit"},
    ],
    "transitions": [
        {
            "label": "fuse",
            "inputs": ["left_sensor", "right_sensor", "maintenance"],
            "outputs": ["fused"],
            "reduction": {"reducer": "peak", "initAccumulator": 0},
            "valueChecking": {"left_sensor": "in_range", "right_sensor": "in_range"},
        },
        {"label": "publish", "inputs": ["fused"], "outputs": ["display"]},
    ],
}


def callbacks(name, kind):
    if kind == "exit":
        return lambda value: print(f"[{name}] peak reading: {value}")
    if kind == "reduce" and name == "peak":
        return max
    raise KeyError(f"No {kind} callback named {name}")


def checkers(name):
    if name == "in_range":
        return lambda value, count: 0 <= value <= 100
    raise KeyError(f"No checker named {name}")


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    net = NetController.from_definition(NET, callbacks, checkers)
    net.set_trace_sink(LoggingTraceSink())

    print("Normal operation")
    net.inject("left_sensor", 40)
    net.inject("right_sensor", 60)

    print("Out of range reading is ignored")
    net.inject("left_sensor", 250)
    net.inject("left_sensor", 20)
    net.inject("right_sensor", 30)

    print("Maintenance blocks fusion")
    net.inject("maintenance", 1)
    net.inject("left_sensor", 10)
    net.inject("right_sensor", 10)
    print(f"State: {net.snapshot()}")

    print("Reset and resume")
    net.reset_all()
    net.inject("left_sensor", 70)
    net.inject("right_sensor", 90)


if __name__ == "__main__":
    main()
