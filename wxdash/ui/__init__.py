"""Textual dashboard for wxdash.

- grid_render: draws rendered grid items as boxed regions
- grid_view: the interactive grid widget wrapping a GridEngine
- dashboard_app: the city dashboard application
"""
