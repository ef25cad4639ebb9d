import os
import webbrowser

import folium

from location_models import Coordinate, RankedRecord

MAP_LINK = "https://www.google.com/maps?q={lat},{lng}&z=15"


def map_link(coordinate: Coordinate) -> str:
    """'View on map' link for a coordinate."""
    return MAP_LINK.format(lat=coordinate.latitude, lng=coordinate.longitude)


def create_results_map(user_position, results, zoom_start=12):
    """
    Create a Folium map with the user's position and each ranked result marked.
    """
    m = folium.Map(
        location=[user_position.latitude, user_position.longitude],
        zoom_start=zoom_start,
        tiles="OpenStreetMap",
    )

    folium.Marker(
        [user_position.latitude, user_position.longitude],
        tooltip="You are here",
        icon=folium.Icon(color="red", icon="user", prefix="fa"),
    ).add_to(m)

    for rank, result in enumerate(results, start=1):
        folium.Marker(
            [result.coordinate.latitude, result.coordinate.longitude],
            popup=folium.Popup(_popup_html(rank, result), max_width=300),
            tooltip=result.record.get("name", "Location"),
            icon=folium.Icon(color="blue", icon="plus", prefix="fa"),
        ).add_to(m)

    return m


def _popup_html(rank: int, result: RankedRecord) -> str:
    rows = "".join(
        f"<b>{key.replace('_', ' ').title()}:</b> {value}<br>"
        for key, value in result.record.attributes.items()
        if key != "name"
    )
    return f"""
        <div style="width: 250px;">
            <h4>{rank}. {result.record.get('name', 'Unknown')}</h4>
            <p>{rows}<b>Distance:</b> {result.distance_km:.2f} km</p>
            <p><a href="{map_link(result.coordinate)}" target="_blank">View on Map</a></p>
        </div>
        """


def save_and_open_map(map_obj, filename="nearest_results_map.html", open_browser=True):
    """
    Save the map to an HTML file and optionally open it in the default browser.
    """
    map_obj.save(filename)
    path = os.path.realpath(filename)
    if open_browser:
        webbrowser.open(f"file://{path}")
    return path
