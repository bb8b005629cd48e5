# apps/reports/__init__.py

"""
Reports - sprint analytics

- Burndown series
- Velocity across completed sprints
- Sprint exports (CSV, PDF, Excel)
"""
