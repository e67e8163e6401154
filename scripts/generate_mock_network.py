import pandas as pd
import numpy as np

def generate_mock_network(num_hubs=6, spokes_per_hub=5, facilities_file="mock_facilities.csv",
                          connections_file="mock_connections.csv", seed=None):
    """
    Generates a facility sheet and a connection sheet shaped like the real exports.
    Every hub gets one round trip (route_id shared by its outbound and inbound legs),
    one outbound milk run and a few standalone direct legs, so every trip type
    shows up in the composer output.
    """
    rng = np.random.default_rng(seed)

    # Centre roughly on central India
    CENTER_LAT = 22.5937
    CENTER_LON = 78.9629

    # 1. Facilities: hubs spread over ~8 degrees, spokes within ~1.5 degrees of their hub
    facilities = []
    hubs = []
    for hub_index in range(num_hubs):
        hub = {
            "name": f"HB{hub_index + 1:02d}_Hub_H",
            "property_lat": np.round(CENTER_LAT + rng.uniform(-4, 4), 6),
            "property_long": np.round(CENTER_LON + rng.uniform(-4, 4), 6),
            "property_address": f"Plot {rng.integers(1, 400)}, Logistics Park",
            "deactivated_at": "",
        }
        facilities.append(hub)
        hubs.append(hub)

        for spoke_index in range(spokes_per_hub):
            suffix = rng.choice(["I", "GW", "DC"], p=[0.6, 0.1, 0.3])
            facilities.append({
                "name": f"SP{hub_index + 1:02d}{spoke_index + 1:02d}_Spoke_{suffix}",
                "property_lat": np.round(hub["property_lat"] + rng.uniform(-1.5, 1.5), 6),
                "property_long": np.round(hub["property_long"] + rng.uniform(-1.5, 1.5), 6),
                "property_address": "",
                "deactivated_at": "",
            })

    # 2. Connections
    def clock(minutes):
        minutes = int(minutes) % 1440
        return f"{minutes // 60:02d}:{minutes % 60:02d}"

    connections = []
    route_counter = 0
    for hub_index, hub in enumerate(hubs):
        spokes = [f for f in facilities if f["name"].startswith(f"SP{hub_index + 1:02d}")]

        # Round trip: hub -> first two spokes, back from both
        route_counter += 1
        start = rng.integers(18 * 60, 23 * 60)
        for offset, spoke in enumerate(spokes[:2]):
            arrival = start + 90 + offset * 75
            connections.append(_connection(hub["name"], spoke["name"], clock(start), clock(arrival),
                                           "FTL", route_counter, 1))
            departure = arrival + rng.integers(30, 120)
            connections.append(_connection(spoke["name"], hub["name"], clock(departure),
                                           clock(departure + 120), "FTL", route_counter, 1))

        # Milk run: hub -> remaining spokes
        route_counter += 1
        start = rng.integers(5 * 60, 9 * 60)
        for offset, spoke in enumerate(spokes[2:]):
            connections.append(_connection(hub["name"], spoke["name"], clock(start),
                                           clock(start + 60 + offset * 45), "CARTING", route_counter, 1))

        # Direct legs to the next hub
        next_hub = hubs[(hub_index + 1) % len(hubs)]
        if next_hub is not hub:
            departure = rng.integers(0, 1440)
            connections.append(_connection(hub["name"], next_hub["name"], clock(departure),
                                           clock(departure + rng.integers(300, 900)), "FTL", None, None))

    # 3. Save to CSV
    pd.DataFrame(facilities).to_csv(facilities_file, index=False)
    pd.DataFrame(connections).to_csv(connections_file, index=False)
    print(f"✅ Generated {len(facilities)} facilities -> '{facilities_file}'")
    print(f"✅ Generated {len(connections)} connections -> '{connections_file}'")


def _connection(origin, destination, departure, arrival, vmode, route_id, route_set_id):
    return {
        "oc": origin,
        "cn": destination,
        "vehicle_size": "32 FT" if vmode == "FTL" else "14 FT",
        "vmode": vmode,
        "cutoff_departure": departure,
        "eta": arrival,
        "tat": "",
        "route_id": route_id if route_id is not None else "",
        "route_set_id": route_set_id if route_set_id is not None else "",
    }


if __name__ == "__main__":
    generate_mock_network(num_hubs=6, spokes_per_hub=5)
