# ops_console/services/active_rides/__init__.py
"""
Active Rides Service: HTTP-доступ к агрегации активных поездок.
"""
