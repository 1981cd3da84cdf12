"""Геометрические утилиты для выбора задач по близости.

GeoJSON храним как сырой текст; здесь только извлекаем опорную точку
и считаем расстояние по большому кругу.
"""

import math
from typing import Any

import orjson

EARTH_RADIUS_KM = 6371.0088


def _iter_positions(node: Any):
    """Обойти все позиции [lon, lat, ...] в GeoJSON узле."""
    if isinstance(node, dict):
        if node.get("type") == "FeatureCollection":
            for feature in node.get("features") or []:
                yield from _iter_positions(feature)
        elif node.get("type") == "Feature":
            yield from _iter_positions(node.get("geometry"))
        elif node.get("type") == "GeometryCollection":
            for geometry in node.get("geometries") or []:
                yield from _iter_positions(geometry)
        else:
            yield from _iter_positions(node.get("coordinates"))
    elif isinstance(node, list):
        if len(node) >= 2 and all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in node[:2]):
            yield float(node[0]), float(node[1])
        else:
            for child in node:
                yield from _iter_positions(child)


def geometry_location(geometry: str | None) -> tuple[float, float] | None:
    """Опорная точка геометрии (среднее всех позиций).

    Args:
        geometry: GeoJSON в виде строки

    Returns:
        (lon, lat) или None если координат нет

    """
    if not geometry:
        return None

    try:
        parsed = orjson.loads(geometry)
    except orjson.JSONDecodeError:
        return None

    positions = list(_iter_positions(parsed))
    if not positions:
        return None

    lon = sum(p[0] for p in positions) / len(positions)
    lat = sum(p[1] for p in positions) / len(positions)
    return lon, lat


def haversine_km(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Расстояние между двумя точками (lon, lat) в километрах."""
    lon1, lat1 = map(math.radians, a)
    lon2, lat2 = map(math.radians, b)

    h = (
        math.sin((lat2 - lat1) / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))
