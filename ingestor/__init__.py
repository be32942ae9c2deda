"""
OpenVPN status collector.

config.py   immutable feature flags and monitored sources
sniffer.py  detects which status file layout a snapshot uses
emitter.py  per-cycle sample buffer and naming modes
reader.py   one read cycle: open, detect, parse, hand samples to a sink
"""
