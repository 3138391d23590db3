"""
Planning agents: Yelp AI client, payload transformers, itinerary builder,
the Mongo-backed store and the orchestrator that strings them together.

Submodules are imported explicitly (``from app.agents.orchestrator import
PlanningOrchestrator``) so importing the package never opens a database
connection or reads the Yelp key.
"""
