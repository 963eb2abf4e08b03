"""
Drop Catch Package
==================

Core simulation and rules for the Drop Catch arcade game:

- Object spawn distribution
- Scoring and lives
- Level progression and spawn cadence
- Collision detection

All tunable parameters are in game_config.yaml.
"""
