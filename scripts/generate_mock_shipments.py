import argparse
import os
import random
import sys
from datetime import datetime

import numpy as np
import pandas as pd

# Allow running as a script without installing as a package
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from shipments.mock_data import seed_store  # noqa: E402
from shipments.store import ShipmentStore  # noqa: E402


def generate_mock_shipments(num_shipments=50, seed=None, output_file="mock_shipments_generated.csv"):
    """
    Generates demo shipments through the real quote pipeline and flattens them
    into a CSV (one row per shipment) for dashboards and manual inspection.
    """
    store = ShipmentStore(rng=random.Random(seed))
    shipments = seed_store(store, count=num_shipments, now=datetime.now())

    data = []
    for shipment in shipments:
        eta = shipment.eta
        data.append({
            "shipment_id": shipment.id,
            "tracking_number": shipment.tracking_number,
            "status": shipment.status.value,
            "carrier_mode": shipment.carrier_mode.value,
            "origin": shipment.origin.label(),
            "destination": shipment.destination.label(),
            "origin_lat": shipment.origin.lat,
            "origin_lng": shipment.origin.lng,
            "dest_lat": shipment.destination.lat,
            "dest_lng": shipment.destination.lng,
            "distance_miles": shipment.distance_miles,
            "duration_hours": eta.duration_hours,
            "estimated_arrival": eta.estimated_arrival.isoformat(),
            "earliest": eta.confidence_window.earliest.isoformat(),
            "latest": eta.confidence_window.latest.isoformat(),
            "risk_level": eta.risk_level.value,
            "weather_events": len(eta.weather_conditions),
            "created_at": shipment.created_at.isoformat(),
        })

    df = pd.DataFrame(data)
    df.to_csv(output_file, index=False)
    print(f"Generated {len(df)} shipments and saved to '{output_file}'")

    print("\nRisk levels:")
    for level, count in df["risk_level"].value_counts().items():
        print(f"  {level}: {count} shipments")

    durations = df["duration_hours"].to_numpy()
    p50, p90 = np.percentile(durations, [50, 90])
    print(f"\nPredicted transit: median {p50:.1f}h, p90 {p90:.1f}h")

    stats = store.stats()
    print(f"On-time rate: {stats.on_time_rate}% ({stats.delivered} delivered, {stats.delayed} delayed)")
    return df


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Generate mock freight shipments as CSV")
    parser.add_argument("--count", type=int, default=50)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--output", default="mock_shipments_generated.csv")
    args = parser.parse_args()

    generate_mock_shipments(num_shipments=args.count, seed=args.seed, output_file=args.output)
