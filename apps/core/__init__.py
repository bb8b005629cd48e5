# apps/core/__init__.py

"""
Core - accounts, teams and projects

- Data model shared by every app
- JWT authentication service
- Team membership permissions
- JSON error handling middleware
"""
