# ops_console/web_admin/monitoring/map_sync.py
"""
Синхронизация карты со списком активных поездок.

MapSyncEngine держит зеркало того, что нарисовано на карте (MapEntity на
каждую поездку), и на каждый опрос или смену выбора приводит карту к паре
(список поездок, выбор). Слои обновляются на месте по стабильным ключам;
удаляются только слои поездок, исчезнувших из списка.

Сама карта скрыта за MapBackend, поэтому движок не зависит от NiceGUI.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Sequence

from ops_console.common.constants import RideStatus, status_style
from ops_console.common.logger import log_debug
from ops_console.shared.models.rides import EnrichedRideView
from ops_console.web_admin.monitoring.formatting import (
    destination_tooltip,
    driver_tooltip,
    pickup_tooltip,
)

LatLng = tuple[float, float]

ORIGIN_COLOR = "#16a34a"
DESTINATION_COLOR = "#ef4444"
ROUTE_OPACITY_FACTOR = 0.6
ROUTE_DASH = "8 8"
SELECTED_Z_INDEX = 1000


# =============================================================================
# ОПИСАНИЯ СЛОЁВ
# =============================================================================

@dataclass(frozen=True)
class MarkerSpec:
    """Желаемое состояние маркера."""
    ride_id: str
    kind: str  # origin, destination, driver
    position: LatLng
    color: str
    label: str = ""
    rotation: float = 0.0
    opacity: float = 1.0
    z_index: int = 0
    tooltip: str = ""
    fallback: bool = False


@dataclass(frozen=True)
class PolylineSpec:
    """Желаемое состояние линии маршрута."""
    ride_id: str
    path: tuple[LatLng, ...]
    color: str
    weight: int = 2
    opacity: float = 1.0
    dashed: bool = True
    z_index: int = 0


LayerSpec = MarkerSpec | PolylineSpec


@dataclass(frozen=True)
class CameraCommand:
    """Команда камере: bounds, focus или default."""
    mode: str
    center: Optional[LatLng] = None
    zoom: Optional[int] = None
    points: tuple[LatLng, ...] = ()


@dataclass
class MapEntity:
    """Зеркало одной поездки на карте: слои по ключам."""
    ride_id: str
    layers: dict[str, LayerSpec] = field(default_factory=dict)


@dataclass
class ReconcileStats:
    """Итог одного прохода синхронизации."""
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    removed: int = 0
    camera: str = "keep"


# =============================================================================
# БЭКЕНД КАРТЫ
# =============================================================================

class MapBackend(ABC):
    """
    Абстрактная карта.

    upsert_* создаёт слой при первом ключе и обновляет его на месте при
    повторном. Клики по слоям бэкенд передаёт через on_layer_click.
    """

    @abstractmethod
    async def upsert_marker(self, key: str, spec: MarkerSpec) -> None:
        """Создаёт или перемещает маркер."""

    @abstractmethod
    async def upsert_polyline(self, key: str, spec: PolylineSpec) -> None:
        """Создаёт или обновляет линию."""

    @abstractmethod
    async def remove_layer(self, key: str) -> None:
        """Удаляет слой с карты."""

    @abstractmethod
    async def fit_bounds(self, points: Sequence[LatLng], padding: int, max_zoom: int) -> None:
        """Вписывает точки в видимую область."""

    @abstractmethod
    async def fly_to(self, center: LatLng, zoom: int) -> None:
        """Плавно перемещает камеру."""

    @abstractmethod
    async def set_view(self, center: LatLng, zoom: int) -> None:
        """Мгновенно выставляет камеру."""


# =============================================================================
# ДВИЖОК
# =============================================================================

class MapSyncEngine:
    """
    Приводит карту к текущему списку поездок и выбору.

    Реализует:
    - Создание, перемещение и удаление слоёв по ключу ride_id:kind
    - Стиль маршрута по статусу (пунктир до начала поездки, сплошная в пути)
    - Маркер водителя по телеметрии или в точке посадки с пометкой
    - Затемнение невыбранных поездок и приоритет выбранной
    - Камеру: охват всех точек, фокус на выбранной, регион по умолчанию
    """

    def __init__(
        self,
        backend: MapBackend,
        default_center: LatLng,
        default_zoom: int = 13,
        focus_zoom: int = 15,
        fit_padding: int = 50,
        fit_max_zoom: int = 15,
        dimmed_opacity: float = 0.3,
    ) -> None:
        self._backend = backend
        self._default_center = default_center
        self._default_zoom = default_zoom
        self._focus_zoom = focus_zoom
        self._fit_padding = fit_padding
        self._fit_max_zoom = fit_max_zoom
        self._dimmed_opacity = dimmed_opacity

        self._entities: dict[str, MapEntity] = {}
        self._last_camera: Optional[CameraCommand] = None

    @classmethod
    def from_settings(cls, backend: MapBackend) -> "MapSyncEngine":
        """Движок с параметрами карты из конфигурации."""
        from ops_console.config import settings

        cfg = settings.monitoring
        return cls(
            backend,
            default_center=cfg.default_center,
            default_zoom=cfg.MAP_DEFAULT_ZOOM,
            focus_zoom=cfg.MAP_FOCUS_ZOOM,
            fit_padding=cfg.MAP_FIT_PADDING,
            fit_max_zoom=cfg.MAP_FIT_MAX_ZOOM,
            dimmed_opacity=cfg.DIMMED_OPACITY,
        )

    @property
    def entities(self) -> dict[str, MapEntity]:
        return self._entities

    @property
    def last_camera(self) -> Optional[CameraCommand]:
        return self._last_camera

    @staticmethod
    def layer_key(ride_id: str, kind: str) -> str:
        return f"{ride_id}:{kind}"

    @staticmethod
    def ride_id_from_key(key: str) -> str:
        return key.rsplit(":", 1)[0]

    # =========================================================================
    # СИНХРОНИЗАЦИЯ
    # =========================================================================

    async def reconcile(
        self,
        rides: Sequence[EnrichedRideView],
        selected_id: Optional[str],
    ) -> ReconcileStats:
        """
        Приводит карту к паре (rides, selected_id).

        Returns:
            Счётчики созданных, обновлённых и удалённых слоёв и режим камеры
        """
        stats = ReconcileStats()
        current_ids = {ride.id for ride in rides}

        for ride_id in [rid for rid in self._entities if rid not in current_ids]:
            stats.removed += await self._remove_entity(ride_id)

        for ride in rides:
            entity = self._entities.setdefault(ride.id, MapEntity(ride_id=ride.id))
            desired = self.build_layers(ride, selected_id)

            for key in [k for k in entity.layers if k not in desired]:
                await self._backend.remove_layer(key)
                del entity.layers[key]
                stats.removed += 1

            for key, spec in desired.items():
                previous = entity.layers.get(key)
                if previous == spec:
                    stats.unchanged += 1
                    continue
                if isinstance(spec, MarkerSpec):
                    await self._backend.upsert_marker(key, spec)
                else:
                    await self._backend.upsert_polyline(key, spec)
                entity.layers[key] = spec
                if previous is None:
                    stats.created += 1
                else:
                    stats.updated += 1

        stats.camera = await self._apply_camera(rides, selected_id)

        await log_debug(
            f"Карта: поездок {len(rides)}, создано {stats.created}, обновлено {stats.updated}, "
            f"без изменений {stats.unchanged}, удалено {stats.removed}, камера {stats.camera}"
        )
        return stats

    def build_layers(
        self,
        ride: EnrichedRideView,
        selected_id: Optional[str],
    ) -> dict[str, LayerSpec]:
        """Желаемые слои одной поездки при данном выборе."""
        is_selected = ride.id == selected_id
        opacity = self._dimmed_opacity if selected_id is not None and not is_selected else 1.0
        z_index = SELECTED_Z_INDEX if is_selected else 0
        color = status_style(ride.status)["color"]

        layers: dict[str, LayerSpec] = {}

        if ride.origin is not None and ride.destination is not None:
            layers[self.layer_key(ride.id, "route")] = PolylineSpec(
                ride_id=ride.id,
                path=(ride.origin.latlng, ride.destination.latlng),
                color=color,
                weight=4 if is_selected else 2,
                opacity=round(opacity * ROUTE_OPACITY_FACTOR, 3),
                dashed=ride.status != RideStatus.IN_PROGRESS.value,
                z_index=z_index,
            )
            layers[self.layer_key(ride.id, "origin")] = MarkerSpec(
                ride_id=ride.id,
                kind="origin",
                position=ride.origin.latlng,
                color=ORIGIN_COLOR,
                label="A",
                opacity=opacity,
                z_index=z_index,
                tooltip=pickup_tooltip(ride),
            )
            layers[self.layer_key(ride.id, "destination")] = MarkerSpec(
                ride_id=ride.id,
                kind="destination",
                position=ride.destination.latlng,
                color=DESTINATION_COLOR,
                label="B",
                opacity=opacity,
                z_index=z_index,
                tooltip=destination_tooltip(ride),
            )

        driver = self._driver_marker(ride, color, opacity, z_index)
        if driver is not None:
            layers[self.layer_key(ride.id, "driver")] = driver

        return layers

    def _driver_marker(
        self,
        ride: EnrichedRideView,
        color: str,
        opacity: float,
        z_index: int,
    ) -> Optional[MarkerSpec]:
        """Маркер водителя: живая позиция с курсом или точка посадки с курсом 0."""
        if ride.driver_location is not None:
            position, rotation, fallback = ride.driver_location.latlng, ride.driver_location.heading, False
        elif ride.origin is not None:
            position, rotation, fallback = ride.origin.latlng, 0.0, True
        else:
            return None

        return MarkerSpec(
            ride_id=ride.id,
            kind="driver",
            position=position,
            color=color,
            rotation=rotation,
            opacity=opacity,
            z_index=z_index,
            tooltip=driver_tooltip(ride, fallback=fallback),
            fallback=fallback,
        )

    # =========================================================================
    # КАМЕРА
    # =========================================================================

    def plan_camera(
        self,
        rides: Sequence[EnrichedRideView],
        selected_id: Optional[str],
    ) -> Optional[CameraCommand]:
        """
        Решает, куда смотреть камере.

        Returns:
            Команда или None, если камеру трогать не нужно
        """
        if not rides:
            return CameraCommand(mode="default", center=self._default_center, zoom=self._default_zoom)

        if selected_id is not None:
            selected = next((ride for ride in rides if ride.id == selected_id), None)
            if selected is not None:
                if selected.driver_location is not None:
                    target = selected.driver_location.latlng
                elif selected.origin is not None:
                    target = selected.origin.latlng
                else:
                    return None
                return CameraCommand(mode="focus", center=target, zoom=self._focus_zoom)

        points = tuple(
            spec.position
            for entity in self._entities.values()
            for spec in entity.layers.values()
            if isinstance(spec, MarkerSpec)
        )
        if not points:
            return CameraCommand(mode="default", center=self._default_center, zoom=self._default_zoom)
        return CameraCommand(mode="bounds", points=points)

    async def _apply_camera(
        self,
        rides: Sequence[EnrichedRideView],
        selected_id: Optional[str],
    ) -> str:
        command = self.plan_camera(rides, selected_id)
        if command is None:
            return "keep"
        # Повтор той же команды не сбивает ручное перемещение карты
        if command == self._last_camera:
            return "keep"

        if command.mode == "bounds":
            await self._backend.fit_bounds(command.points, self._fit_padding, self._fit_max_zoom)
        elif command.mode == "focus":
            await self._backend.fly_to(command.center, command.zoom)
        else:
            await self._backend.set_view(command.center, command.zoom)

        self._last_camera = command
        return command.mode

    async def reset(self) -> None:
        """Удаляет все слои (при закрытии страницы или смене карты)."""
        for ride_id in list(self._entities):
            await self._remove_entity(ride_id)
        self._last_camera = None

    async def _remove_entity(self, ride_id: str) -> int:
        """
        Удаляет слои поездки с карты. Слой забывается только после успешного
        remove_layer, сущность только когда слоёв не осталось.
        """
        entity = self._entities[ride_id]
        removed = 0
        for key in list(entity.layers):
            await self._backend.remove_layer(key)
            del entity.layers[key]
            removed += 1
        del self._entities[ride_id]
        return removed
