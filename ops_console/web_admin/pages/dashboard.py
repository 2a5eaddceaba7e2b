from nicegui import ui

from ops_console.config import settings
from ops_console.common.logger import log_info
from ops_console.shared.models.rides import RideSummary
from ops_console.web_admin.infra.api_clients import ActiveRidesClient
from ops_console.web_admin.monitoring.formatting import format_time_ago
from ops_console.web_admin.monitoring.poller import Poller


async def dashboard_page():
    ui.markdown('## Дашборд')

    client = ActiveRidesClient()
    state = {'summary': RideSummary(), 'loaded': False}

    @ui.refreshable
    def summary_cards() -> None:
        summary: RideSummary = state['summary']
        with ui.row().classes('gap-4 mb-4'):
            _stat_card('🚕', 'Активные поездки', summary.total)
            _stat_card('✅', 'Подтверждены', summary.confirmed)
            _stat_card('📍', 'Водитель на месте', summary.arrived)
            _stat_card('🛣️', 'В пути', summary.in_progress)
            _stat_card('📡', 'С GPS', summary.with_location)
        if poller.last_success_at:
            ui.label(f'Обновлено {format_time_ago(poller.last_success_at)}').classes('text-xs text-gray-500')
        elif not state['loaded']:
            ui.label('Загрузка...').classes('text-xs text-gray-500')

    def apply_summary(summary: RideSummary) -> None:
        state['summary'] = summary
        state['loaded'] = True
        summary_cards.refresh()

    def on_error(error: Exception) -> None:
        ui.notify('Не удалось обновить счётчики поездок', type='warning')

    # Счётчики опрашиваются реже, чем карта: отдельный цикл со своим периодом
    poller = Poller(
        client.get_summary,
        settings.monitoring.SUMMARY_POLL_INTERVAL,
        on_result=apply_summary,
        on_error=on_error,
        name='summary',
    )

    summary_cards()
    ui.button('Открыть мониторинг', icon='map', on_click=lambda: ui.navigate.to('/monitoring')).props('outline')

    async def on_disconnect() -> None:
        poller.stop()
        await client.close()
        await log_info('Дашборд: страница закрыта, опрос остановлен', type_msg='debug')

    ui.context.client.on_disconnect(on_disconnect)

    await ui.context.client.connected()
    poller.start()


def _stat_card(icon: str, title: str, value: int) -> None:
    """Карточка статистики."""
    with ui.card().classes('p-4'):
        ui.label(f'{icon} {title}').classes('text-sm text-gray-600')
        ui.label(str(value)).classes('text-2xl font-bold')
