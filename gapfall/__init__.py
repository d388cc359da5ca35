"""
Gapfall Package
===============

This package contains the simulation core, agent environment, and
evaluation harness for Gapfall, a single-screen arcade game where a
falling circle must thread the gaps of scrolling obstacles.

- Physics and obstacle scrolling
- Collision policies (hard-fail and forgiving)
- Scoring, boost window, and win/lose rules
- Frame driver and collaborator interfaces

All tunable parameters are in game_config.yaml.
"""
