import os

# Настройка пути хранения локальных данных NiceGUI (чтобы не создавать папку .nicegui в корне)
os.environ.setdefault('NICEGUI_STORAGE_PATH', '/tmp/ops_console_nicegui_admin')

from nicegui import app, ui
from ops_console.config import settings
from ops_console.common.logger import log_info, TypeMsg
from ops_console.web_admin.components.sidebar import create_sidebar
from ops_console.web_admin.pages.dashboard import dashboard_page
from ops_console.web_admin.pages.monitoring import monitoring_page

def create_app() -> None:

    def frame():
        with ui.header().classes(replace='row items-center'):
            ui.button(on_click=lambda: left_drawer.toggle(), icon='menu').props('flat color=white')
            ui.label('Ops Console').classes('text-h6 ml-4')

        with ui.left_drawer(value=True) as left_drawer:
            create_sidebar()

    @ui.page('/')
    async def index_page():
        frame()
        await dashboard_page()

    @ui.page('/monitoring')
    async def page_monitoring():
        frame()
        await monitoring_page()

    @app.on_startup
    async def startup() -> None:
        await log_info(
            f"Web Admin UI запущен, сервис активных поездок: {settings.deployment.active_rides_url}",
            type_msg=TypeMsg.INFO,
        )

def run_web(host: str = "0.0.0.0", port: int = 8081, reload: bool = False) -> None:
    create_app()
    ui.run(host=host, port=port, reload=reload, title="Ops Console", show=False)
