"""
Flapgate
========

A single-screen arcade game: the avatar falls under gravity and must flap
through a stream of scrolling gated obstacles without touching them, the
ground or the ceiling.

The simulation core lives in flapgate.flap_core. All tunable parameters
are in game_config.yaml and are fixed once a game is constructed.
"""
