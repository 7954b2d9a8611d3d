"""HTTP routers mounted by :mod:`helpdesk.main`."""
