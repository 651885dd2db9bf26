# simulator/make_csv.py
import argparse, csv, random
from datetime import datetime, timedelta, timezone

import numpy as np

SIZES = [
    (100, 100), (150, 150), (200, 200), (300, 250), (320, 240), (400, 300),
    (468, 60), (640, 480), (728, 90), (800, 600), (1024, 768), (1280, 720),
    (1920, 1080), (160, 600), (250, 250), (336, 280),
]
TEXTS = ["Hello", "Ad space", "Coming soon", "Logo", "Banner", "Hero image", "Avatar"]
REFERRERS = [
    "https://example.com/",
    "https://example.com/blog",
    "https://staging.example.org/",
    "http://localhost:3000/",
    "https://docs.example.net/getting-started",
]

def iso_utc(dt) -> str:
    # "YYYY-MM-DDTHH:MM:SSZ"
    return dt.replace(microsecond=0, tzinfo=timezone.utc).isoformat().replace("+00:00", "Z")

def zipf_weights(n: int, s: float = 1.07) -> np.ndarray:
    # weights ~ 1/(rank^s)
    ranks = np.arange(1, n + 1)
    weights = 1.0 / (ranks ** s)
    return weights / weights.sum()

def rand_extras(rng: random.Random, text_pct: float = 0.3, square_pct: float = 0.1, ref_pct: float = 0.6):
    text = rng.choice(TEXTS) if rng.random() < text_pct else ""
    square = rng.choice([50, 100, 150]) if rng.random() < square_pct else ""
    referrer = rng.choice(REFERRERS) if rng.random() < ref_pct else ""
    return square, text, referrer

def write_csv(rows, outfile: str):
    with open(outfile, "w", newline="") as f:
        w = csv.writer(f)
        w.writerow(["timestamp", "width", "height", "square", "text", "referrer"])
        w.writerows(rows)

def gen_zipf(minutes: int, rps: int, seed: int | None = None):
    """Skewed popularity: a few sizes dominate."""
    rng = random.Random(seed)
    np_rng = np.random.default_rng(seed)
    weights = zipf_weights(len(SIZES))
    start = datetime.now(timezone.utc)
    total = minutes * 60 * rps
    rows = []
    for i in range(total):
        ts = iso_utc(start + timedelta(seconds=i / rps))
        w, h = SIZES[int(np_rng.choice(len(SIZES), p=weights))]
        rows.append([ts, w, h, *rand_extras(rng)])
    return rows

def gen_uniform(minutes: int, rps: int, seed: int | None = None):
    rng = random.Random(seed)
    start = datetime.now(timezone.utc)
    total = minutes * 60 * rps
    rows = []
    for i in range(total):
        ts = iso_utc(start + timedelta(seconds=i / rps))
        w, h = rng.choice(SIZES)
        rows.append([ts, w, h, *rand_extras(rng)])
    return rows

def gen_flash(minutes: int, rps: int, seed: int | None = None, spike_pct: float = 0.5):
    """
    Flash crowd: middle window spikes one hot size from one referrer.
    spike_pct = fraction of the run that is 'hot' (0.5 => middle 50%).
    """
    rng = random.Random(seed)
    start = datetime.now(timezone.utc)
    total = minutes * 60 * rps
    mid_start = int(total * (0.5 - spike_pct/2))
    mid_end   = int(total * (0.5 + spike_pct/2))
    hot_size = rng.choice(SIZES)
    hot_ref = rng.choice(REFERRERS)

    rows = []
    for i in range(total):
        ts = iso_utc(start + timedelta(seconds=i / rps))
        if mid_start <= i < mid_end and rng.random() < 0.8:
            w, h = hot_size
            square, text, _ = rand_extras(rng)
            rows.append([ts, w, h, square, text, hot_ref])
        else:
            w, h = rng.choice(SIZES)
            rows.append([ts, w, h, *rand_extras(rng)])
    return rows

def main():
    p = argparse.ArgumentParser(description="Generate synthetic image request CSVs.")
    p.add_argument("--workload", choices=["zipf", "uniform", "flash"], required=True)
    p.add_argument("--minutes", type=int, default=2, help="duration in minutes")
    p.add_argument("--rps", type=int, default=5, help="requests per second")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--outfile", required=True)
    args = p.parse_args()

    if args.workload == "zipf":
        rows = gen_zipf(args.minutes, args.rps, args.seed)
    elif args.workload == "flash":
        rows = gen_flash(args.minutes, args.rps, args.seed)
    else:
        rows = gen_uniform(args.minutes, args.rps, args.seed)

    write_csv(rows, args.outfile)
    print(f"Wrote {len(rows)} rows to {args.outfile}")

if __name__ == "__main__":
    main()
