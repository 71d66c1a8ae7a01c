from attendance_engine.geofence.model import GeofenceLocation, GeoPoint
from attendance_engine.geofence.resolver import GeoResolver, haversine_m

HQ = GeofenceLocation(location_id=1, name="HQ", latitude=12.9716, longitude=77.5946, radius_m=200)
ANNEX = GeofenceLocation(location_id=2, name="Annex", latitude=12.9816, longitude=77.5946, radius_m=200)


def _resolve(point, locations, employee_id=1, department_id=10):
    return GeoResolver().resolve(point, employee_id=employee_id, department_id=department_id, locations=locations)


def test_haversine_one_thousandth_degree_latitude():
    d = haversine_m(GeoPoint(12.9716, 77.5946), GeoPoint(12.9726, 77.5946))

    assert 110 < d < 112


def test_point_inside_a_geofence():
    result = _resolve(GeoPoint(12.9717, 77.5946), [HQ, ANNEX])

    assert result.is_within_any_geofence is True
    assert result.nearest_location == HQ
    assert result.distance_m < 20


def test_point_outside_reports_nearest_location_and_distance():
    result = _resolve(GeoPoint(12.9760, 77.5946), [HQ, ANNEX])

    assert result.is_within_any_geofence is False
    assert result.nearest_location == HQ
    assert 480 < result.distance_m < 500


def test_no_candidates():
    result = _resolve(GeoPoint(12.9716, 77.5946), [])

    assert result.is_within_any_geofence is False
    assert result.nearest_location is None
    assert result.distance_m is None


def test_restricted_location_is_skipped_for_other_departments():
    restricted = GeofenceLocation(
        location_id=3, name="Lab", latitude=12.9716, longitude=77.5946, radius_m=200, allowed_department_ids=frozenset({99})
    )

    result = _resolve(GeoPoint(12.9716, 77.5946), [restricted, ANNEX])

    assert result.nearest_location == ANNEX
    assert result.is_within_any_geofence is False


def test_restricted_location_allows_listed_employee():
    restricted = GeofenceLocation(
        location_id=3, name="Lab", latitude=12.9716, longitude=77.5946, radius_m=200, allowed_employee_ids=frozenset({7})
    )

    assert _resolve(GeoPoint(12.9716, 77.5946), [restricted], employee_id=7).is_within_any_geofence is True


def test_inactive_location_is_skipped():
    inactive = GeofenceLocation(location_id=4, name="Old", latitude=12.9716, longitude=77.5946, radius_m=200, is_active=False)

    assert _resolve(GeoPoint(12.9716, 77.5946), [inactive]).nearest_location is None


def test_ties_go_to_lowest_location_id_regardless_of_order():
    twin = GeofenceLocation(location_id=9, name="Twin", latitude=12.9716, longitude=77.5946, radius_m=200)

    first = _resolve(GeoPoint(12.9716, 77.5946), [twin, HQ])
    second = _resolve(GeoPoint(12.9716, 77.5946), [HQ, twin])

    assert first.nearest_location == HQ
    assert second.nearest_location == HQ
