"""Night-shift attendance package.

Feature modules (window, shifts, attendance, jobs, ...) sit behind a thin Flask
controller layer; business rules live in services and batch jobs, persistence
behind repository interfaces.
"""

__version__ = "1.0.0"
