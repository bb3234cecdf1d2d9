"""
Adapters — the only place that touches external tools.

``shell`` spawns local binaries, ``containers`` talks to the docker CLI.
Core services call these, never ``subprocess`` directly.
"""
