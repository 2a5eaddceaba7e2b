from functools import partial

from nicegui import ui

from ops_console.config import settings
from ops_console.common.constants import STATUS_STYLES, status_style
from ops_console.common.logger import log_info
from ops_console.shared.models.rides import EnrichedRideView
from ops_console.web_admin.components.live_map import GoogleLiveMap
from ops_console.web_admin.infra.api_clients import ActiveRidesClient
from ops_console.web_admin.monitoring.controller import MonitoringController
from ops_console.web_admin.monitoring.formatting import (
    address_or_unknown,
    booking_label,
    driver_name,
    format_price,
    format_time_ago,
    passenger_name,
    status_label,
)
from ops_console.web_admin.monitoring.map_sync import MapSyncEngine


async def monitoring_page():
    cfg = settings.monitoring
    client = ActiveRidesClient()
    controller: MonitoringController

    async def on_layer_click(key: str) -> None:
        await controller.select(MapSyncEngine.ride_id_from_key(key))

    live_map = GoogleLiveMap(center=cfg.default_center, zoom=cfg.MAP_DEFAULT_ZOOM, on_layer_click=on_layer_click)
    engine = MapSyncEngine.from_settings(live_map) if live_map.available else None

    def refresh_panels() -> None:
        header_info.refresh()
        ride_list.refresh()
        ride_details.refresh()

    controller = MonitoringController(
        fetch_rides=client.get_active_rides,
        map_engine=engine,
        interval=cfg.ACTIVE_RIDES_POLL_INTERVAL,
        notify=lambda message: ui.notify(message, type='warning'),
        on_change=refresh_panels,
    )

    # === HEADER ===

    @ui.refreshable
    def header_info() -> None:
        stats = controller.stats
        subtitle = f'{stats.total} активных поездок'
        if controller.last_updated:
            subtitle += f' · Обновлено {format_time_ago(controller.last_updated)}'
        ui.label(subtitle).classes('text-sm text-gray-500')

        with ui.row().classes('gap-2 items-center'):
            for status, style in STATUS_STYLES.items():
                count = getattr(stats, status, 0)
                ui.badge(f"{count} {style['label']}", color=style['badge']).props('rounded')

    async def toggle_live() -> None:
        await controller.set_live(not controller.live)
        live_button.props(f"color={'positive' if controller.live else 'grey'}")
        live_button.set_text('Live' if controller.live else 'Пауза')

    async def manual_refresh() -> None:
        refresh_button.props('loading')
        try:
            await controller.refresh()
        finally:
            refresh_button.props(remove='loading')

    with ui.row().classes('w-full items-center justify-between mb-2'):
        with ui.column().classes('gap-0'):
            ui.label('Мониторинг поездок').classes('text-2xl font-bold')
            header_info()
        with ui.row().classes('gap-2 items-center'):
            live_button = ui.button('Live', icon='sensors', on_click=toggle_live).props('color=positive')
            refresh_button = ui.button(icon='refresh', on_click=manual_refresh).props('flat round')

    # === СПИСОК ПОЕЗДОК ===

    def ride_row(ride: EnrichedRideView) -> None:
        style = status_style(ride.status)
        selected = controller.selection.is_selected(ride.id)
        card_classes = 'w-full p-3 cursor-pointer ' + ('ring-2 ring-blue-500 bg-blue-50' if selected else '')

        with ui.card().classes(card_classes).on('click', partial(controller.select, ride.id)):
            with ui.row().classes('w-full items-center justify-between no-wrap'):
                ui.label(passenger_name(ride)).classes('font-semibold truncate')
                ui.badge(style['label'], color=style['badge'])
            ui.label(f"{driver_name(ride) if ride.confirmed_driver else 'Нет водителя'} · {format_price(ride.price, 0)}").classes('text-xs text-gray-500')
            with ui.row().classes('items-center gap-1'):
                if ride.has_live_location:
                    ui.icon('gps_fixed', size='xs', color='positive')
                    ui.label('GPS активен').classes('text-xs text-green-600')
                else:
                    ui.icon('gps_off', size='xs', color='grey')
                    ui.label('Нет GPS').classes('text-xs text-gray-400')

    @ui.refreshable
    def ride_list() -> None:
        if controller.loading:
            ui.spinner(size='lg').classes('self-center mt-8')
            return
        if not controller.rides:
            with ui.column().classes('w-full items-center mt-8'):
                ui.icon('directions_car', size='3rem', color='grey-5')
                ui.label('Нет активных поездок').classes('text-gray-500')
            return
        for ride in controller.rides:
            ride_row(ride)

    # === КАРТОЧКА ВЫБРАННОЙ ПОЕЗДКИ ===

    @ui.refreshable
    def ride_details() -> None:
        ride = controller.selected_ride
        if ride is None:
            return
        with ui.card().classes('absolute bottom-4 left-4 right-4 z-10 p-4 shadow-lg'):
            with ui.row().classes('w-full items-center justify-between'):
                with ui.row().classes('items-center gap-2'):
                    ui.label(passenger_name(ride)).classes('text-lg font-bold')
                    ui.badge(status_label(ride.status), color=status_style(ride.status)['badge'])
                    ui.label(booking_label(ride)).classes('text-sm text-gray-500')
                ui.button(icon='close', on_click=controller.clear_selection).props('flat round dense')

            with ui.grid(columns=2).classes('w-full gap-x-6 gap-y-1 text-sm'):
                _detail('Телефон пассажира', ride.passenger_info.phone_number if ride.passenger_info else None)
                _detail('Водитель', driver_name(ride) if ride.confirmed_driver else None)
                _detail('Телефон водителя', ride.confirmed_driver.phone_number if ride.confirmed_driver else None)
                _detail('Посадка', address_or_unknown(ride.origin))
                _detail('Назначение', address_or_unknown(ride.destination))
                _detail('Стоимость', format_price(ride.price))
                _detail('Расстояние', ride.distance)
                _detail('Время в пути', ride.duration)
                _detail('Оплата', ride.payment_method)
                _detail(
                    'GPS',
                    format_time_ago(ride.driver_location.updated_at) if ride.driver_location else 'Нет данных',
                )

    with ui.row().classes('w-full no-wrap gap-4').style('height: calc(100vh - 160px)'):
        with ui.scroll_area().classes('w-96 h-full'):
            with ui.column().classes('w-full gap-2'):
                ride_list()
        with ui.element('div').classes('relative flex-grow h-full rounded-xl overflow-hidden'):
            live_map.render()
            ride_details()

    # Подпись "Обновлено N с назад" должна идти и без новых данных
    ui.timer(5.0, header_info.refresh)

    async def on_disconnect() -> None:
        controller.stop()
        await client.close()
        await log_info('Мониторинг: страница закрыта, опрос остановлен', type_msg='debug')

    ui.context.client.on_disconnect(on_disconnect)

    await ui.context.client.connected()
    controller.start()


def _detail(title: str, value) -> None:
    with ui.column().classes('gap-0'):
        ui.label(title).classes('text-xs text-gray-500')
        ui.label(value or '—').classes('font-medium')
