from __future__ import annotations

import json
import uuid
from typing import Any, Awaitable, Callable, Optional, Sequence, Tuple

from nicegui import ui

from ops_console.config import settings
from ops_console.common.logger import log_info
from ops_console.web_admin.monitoring.map_sync import MapBackend, MarkerSpec, PolylineSpec

CLICK_EVENT = "live_map_layer_click"

# SVG path машины (как directions_car), носом на север
CAR_PATH = "M18.92 6.01C18.72 5.42 18.16 5 17.5 5h-11c-.66 0-1.21.42-1.42 1.01L3 12v8c0 .55.45 1 1 1h1c.55 0 1-.45 1-1v-1h12v1c0 .55.45 1 1 1h1c.55 0 1-.45 1-1v-8l-2.08-5.99zM6.85 7h10.29l1.08 3.11H5.77L6.85 7zM19 17H5v-5h14v5z"

JS_LOADER = """
(g=>{
    var h,a,k,p="The Google Maps JavaScript API",c="google",l="importLibrary",q="__ib__",m=document,b=window;
    b=b[c]||(b[c]={});
    var d=b.maps||(b.maps={}),r=new Set,e=new URLSearchParams,u=()=>h||(h=new Promise(async(f,n)=>{
        await (a=m.createElement("script"));
        e.set("libraries",[...r]+"");
        for(k in g)e.set(k.replace(/[A-Z]/g,t=>"_"+t[0].toLowerCase()),g[k]);
        e.set("callback",c+".maps."+q);
        a.src=`https://maps.${c}apis.com/maps/api/js?`+e;
        d[q]=f;
        a.onerror=()=>h=n(Error(p+" could not load."));
        a.nonce=m.querySelector("script[nonce]")?.nonce||"";
        m.head.append(a)
    }));
    d[l]?console.warn(p+" only loads once. Ignoring:",g):d[l]=(f,...n)=>r.add(f)&&u().then(()=>d[l](f,...n))
})
"""


class GoogleLiveMap(MapBackend):
    """
    Карта Google Maps для мониторинга активных поездок.
    Слои хранятся в JS-реестре карты по стабильным ключам и обновляются на месте.
    Клики по слоям возвращаются в Python через emitEvent.
    """

    def __init__(
        self,
        center: Tuple[float, float],
        zoom: int = 13,
        on_layer_click: Optional[Callable[[str], Awaitable[None]]] = None,
    ) -> None:
        self.map_id = f"map_{uuid.uuid4().hex}"
        self.center = center
        self.zoom = zoom
        self.on_layer_click = on_layer_click
        self.map_element: Optional[ui.element] = None

    @property
    def available(self) -> bool:
        return bool(settings.google_maps.GOOGLE_MAPS_API_KEY)

    def render(self) -> None:
        """Рендерит контейнер карты и инициализирует JS."""
        if not self.available:
            with ui.column().classes('w-full h-full items-center justify-center bg-gray-200'):
                ui.icon('map', size='4rem', color='gray-400')
                ui.label("API ключ Google Maps не найден").classes('text-gray-500')
            return

        self.map_element = ui.element('div').props(f'id="{self.map_id}"').classes('w-full h-full absolute top-0 left-0 z-0 bg-white')
        ui.on(CLICK_EVENT, self._handle_click)

        self._init_map_js()

    def _init_map_js(self) -> None:
        """Инициализирует карту и реестр слоёв через JS."""
        js_code = f"""
            {JS_LOADER}({{
                key: "{settings.google_maps.GOOGLE_MAPS_API_KEY}",
                v: "weekly",
            }});

            window.map_{self.map_id} = null;
            window.onMapReady_{self.map_id} = [];
            window.layers_{self.map_id} = {{}};
            window.infoWindow_{self.map_id} = null;

            window.whenMapReady_{self.map_id} = (callback) => {{
                if (window.map_{self.map_id}) {{
                    callback(window.map_{self.map_id});
                }} else {{
                    window.onMapReady_{self.map_id}.push(callback);
                }}
            }};

            window.bindLayer_{self.map_id} = (key, layer, tooltip) => {{
                layer.addListener('click', () => {{
                    emitEvent('{CLICK_EVENT}', {{ map_id: '{self.map_id}', key: key }});
                }});
                layer.addListener('mouseover', (event) => {{
                    const info = window.infoWindow_{self.map_id};
                    if (!info || !layer.tooltip) return;
                    info.setContent(layer.tooltip);
                    if (layer instanceof google.maps.Marker) {{
                        info.open({{ map: window.map_{self.map_id}, anchor: layer }});
                    }} else {{
                        info.setPosition(event.latLng);
                        info.open({{ map: window.map_{self.map_id} }});
                    }}
                }});
                layer.addListener('mouseout', () => {{
                    if (window.infoWindow_{self.map_id}) window.infoWindow_{self.map_id}.close();
                }});
                layer.tooltip = tooltip;
            }};

            async function initMap_{self.map_id}() {{
                try {{
                    const {{ Map, InfoWindow }} = await google.maps.importLibrary("maps");

                    const mapElement = document.getElementById("{self.map_id}");
                    if (mapElement) {{
                        window.map_{self.map_id} = new Map(mapElement, {{
                            center: {{ lat: {self.center[0]}, lng: {self.center[1]} }},
                            zoom: {self.zoom},
                            disableDefaultUI: true,
                            zoomControl: true,
                            clickableIcons: false,
                            gestureHandling: "auto",
                        }});
                        window.infoWindow_{self.map_id} = new InfoWindow({{ disableAutoPan: true }});

                        window.onMapReady_{self.map_id}.forEach(cb => cb(window.map_{self.map_id}));
                        window.onMapReady_{self.map_id} = [];
                    }} else {{
                        console.error("Map element not found: {self.map_id}");
                    }}
                }} catch (e) {{
                    console.error("Error initializing map {self.map_id}:", e);
                }}
            }}

            initMap_{self.map_id}();
        """
        ui.run_javascript(js_code)

    def _when_ready(self, body: str) -> None:
        js = f"""
        if (window.whenMapReady_{self.map_id}) {{
            window.whenMapReady_{self.map_id}(map => {{
                {body}
            }});
        }}
        """
        ui.run_javascript(js)

    async def _handle_click(self, event: Any) -> None:
        args = event.args or {}
        if args.get('map_id') != self.map_id or self.on_layer_click is None:
            return
        await self.on_layer_click(args.get('key', ''))

    # =========================================================================
    # MapBackend
    # =========================================================================

    async def upsert_marker(self, key: str, spec: MarkerSpec) -> None:
        """Создаёт маркер или обновляет позицию, иконку и прозрачность существующего."""
        if not self.available:
            return
        icon = self._marker_icon(spec)
        label = (
            {'text': spec.label, 'color': 'white', 'fontSize': '10px', 'fontWeight': '700'}
            if spec.label else None
        )
        self._when_ready(f"""
                const layers = window.layers_{self.map_id};
                const key = {json.dumps(key)};
                const pos = {{ lat: {spec.position[0]}, lng: {spec.position[1]} }};
                const icon = {icon};
                let marker = layers[key];
                if (marker) {{
                    marker.setPosition(pos);
                    marker.setIcon(icon);
                    marker.setLabel({json.dumps(label)});
                    marker.setOpacity({spec.opacity});
                    marker.setZIndex({spec.z_index});
                    marker.tooltip = {json.dumps(spec.tooltip)};
                }} else {{
                    marker = new google.maps.Marker({{
                        position: pos,
                        map: map,
                        icon: icon,
                        label: {json.dumps(label)},
                        opacity: {spec.opacity},
                        zIndex: {spec.z_index},
                    }});
                    layers[key] = marker;
                    window.bindLayer_{self.map_id}(key, marker, {json.dumps(spec.tooltip)});
                }}
        """)

    @staticmethod
    def _marker_icon(spec: MarkerSpec) -> str:
        """JS-выражение иконки: машина с поворотом по курсу или круг с буквой."""
        if spec.kind == "driver":
            return f"""{{
                    path: {json.dumps(CAR_PATH)},
                    scale: 1.4,
                    fillColor: {json.dumps(spec.color)},
                    fillOpacity: 1,
                    strokeColor: "#ffffff",
                    strokeWeight: 1,
                    rotation: {spec.rotation},
                    anchor: new google.maps.Point(12, 12),
                }}"""
        return f"""{{
                    path: google.maps.SymbolPath.CIRCLE,
                    scale: 11,
                    fillColor: {json.dumps(spec.color)},
                    fillOpacity: 1,
                    strokeColor: "#ffffff",
                    strokeWeight: 3,
                }}"""

    async def upsert_polyline(self, key: str, spec: PolylineSpec) -> None:
        """Создаёт линию маршрута или обновляет путь и стиль существующей."""
        if not self.available:
            return
        path = json.dumps([{'lat': lat, 'lng': lng} for lat, lng in spec.path])
        # Пунктир в Google Maps рисуется повторяющимся символом поверх прозрачной линии
        if spec.dashed:
            options = {
                'strokeColor': spec.color,
                'strokeOpacity': 0,
                'strokeWeight': spec.weight,
                'zIndex': spec.z_index,
                'icons': [{
                    'icon': {'path': 'M 0,-1 0,1', 'strokeOpacity': spec.opacity, 'scale': spec.weight},
                    'offset': '0',
                    'repeat': '16px',
                }],
            }
        else:
            options = {
                'strokeColor': spec.color,
                'strokeOpacity': spec.opacity,
                'strokeWeight': spec.weight,
                'zIndex': spec.z_index,
                'icons': [],
            }
        self._when_ready(f"""
                const layers = window.layers_{self.map_id};
                const key = {json.dumps(key)};
                const options = {json.dumps(options)};
                let line = layers[key];
                if (line) {{
                    line.setOptions(options);
                    line.setPath({path});
                }} else {{
                    line = new google.maps.Polyline({{ ...options, path: {path}, map: map }});
                    layers[key] = line;
                    window.bindLayer_{self.map_id}(key, line, "");
                }}
        """)

    async def remove_layer(self, key: str) -> None:
        if not self.available:
            return
        self._when_ready(f"""
                const layers = window.layers_{self.map_id};
                const key = {json.dumps(key)};
                if (layers[key]) {{
                    google.maps.event.clearInstanceListeners(layers[key]);
                    layers[key].setMap(null);
                    delete layers[key];
                }}
        """)

    async def fit_bounds(self, points: Sequence[Tuple[float, float]], padding: int, max_zoom: int) -> None:
        """Масштабирует карту под все точки, не приближая сильнее max_zoom."""
        if not self.available or not points:
            return
        await log_info(f"Карта {self.map_id}: масштабирование под {len(points)} точек", type_msg="debug")
        points_js = json.dumps([{'lat': lat, 'lng': lng} for lat, lng in points])
        self._when_ready(f"""
                const bounds = new google.maps.LatLngBounds();
                {points_js}.forEach(p => bounds.extend(p));
                google.maps.event.addListenerOnce(map, 'idle', () => {{
                    if (map.getZoom() > {max_zoom}) map.setZoom({max_zoom});
                }});
                map.fitBounds(bounds, {padding});
        """)

    async def fly_to(self, center: Tuple[float, float], zoom: int) -> None:
        if not self.available:
            return
        self._when_ready(f"""
                map.panTo({{ lat: {center[0]}, lng: {center[1]} }});
                map.setZoom({zoom});
        """)

    async def set_view(self, center: Tuple[float, float], zoom: int) -> None:
        if not self.available:
            return
        self._when_ready(f"""
                map.setCenter({{ lat: {center[0]}, lng: {center[1]} }});
                map.setZoom({zoom});
        """)
