# tutorlink/db/base.py
# Alembic model registry: imports Base + every model so Alembic detects all tables.
# Do NOT import this file from model files (use tutorlink.db.base_class instead).
# This file is only imported by:
#   - alembic/env.py        (schema detection)
#   - endpoint modules      (so relationship() strings resolve)
#   - tests/conftest.py     (create_all)

from tutorlink.db.base_class import Base  # noqa: F401

# ── Import all models here so Alembic can detect them ────────────────────────
# Order matters: parent tables before child tables (foreign key dependencies)

from tutorlink.models.user import User                                      # noqa: F401, E402
from tutorlink.models.tutor_request import TutorRequest, TutorAssignment    # noqa: F401, E402
from tutorlink.models.application import TutorApplication                   # noqa: F401, E402
from tutorlink.models.demo_class import DemoClass                           # noqa: F401, E402
