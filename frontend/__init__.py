"""
Tintern web frontend - Flask surface applying the route guard to page
requests and storing the session in two path-scoped cookies.
"""
