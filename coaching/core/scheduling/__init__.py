"""
Class scheduling engine.

Pure operations on a single class session aggregate:
  - enrollment: roster mutation with capacity and uniqueness checks
  - attendance: per-learner attendance upserts
  - lifecycle: status transitions and their side effects
  - guards: edit/delete preconditions
  - derived: read-only projections (fullness, progress, time to start)
  - statistics: attendance counts and rate
  - recurrence: expansion of a recurrence template into session windows

Modules are imported directly (e.g. ``from coaching.core.scheduling import
enrollment``); this package does not re-export them so that the ORM models
can depend on ``enums`` without import cycles.
"""
