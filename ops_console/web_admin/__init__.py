# ops_console/web_admin/__init__.py
"""
Консоль оператора на NiceGUI: дашборд и живой мониторинг поездок.
Приложение создаётся в ops_console.web_admin.app (create_app, run_web).
"""
