# ops_console/shared/__init__.py
"""
Общий код между сервисом агрегации и админкой.

Модули:
- models: Pydantic-модели HTTP-контракта
"""

__all__: list[str] = []
