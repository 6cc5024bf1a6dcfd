"""
Duality - Session-scoped Rules Engine for a voice-driven tabletop RPG.

A deterministic, rules-driven engine that an LLM tool-calling bridge
invokes many times per scene. The engine provides:
- Per-session game state (player, GM, scene)
- Duality rolls, damage thresholds and adversary attacks
- Hope / Fear / Stress / Armor economies
- Feature, equipment, inventory and domain card lifecycles
- A stable textual projection of the state for prompt injection
"""

__version__ = "0.1.0"
