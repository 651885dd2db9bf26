# simulator/replay.py
import argparse, csv, time, requests

def build_request(row, base_url: str):
    url = f"{base_url.rstrip('/')}/img/{row['width']}/{row['height']}"
    params = {}
    if row.get("square"):
        params["square"] = row["square"]
    if row.get("text"):
        params["text"] = row["text"]
    headers = {"Referer": row["referrer"]} if row.get("referrer") else {}
    return url, params, headers

def replay(csv_file: str, base_url: str, rate: float | None, dry_run: bool):
    sent = ok = fail = 0

    def get_row(row):
        nonlocal ok, fail
        url, params, headers = build_request(row, base_url)
        if dry_run:
            return True
        try:
            r = requests.get(url, params=params, headers=headers, timeout=10)
            if r.status_code == 200:
                ok += 1
                return True
            else:
                fail += 1
                print("GET failed:", r.status_code, r.text[:200])
                return False
        except requests.RequestException as e:
            fail += 1
            print("GET error:", e)
            return False

    with open(csv_file, newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            sent += 1
            get_row(row)
            if rate and rate > 0:
                time.sleep(1.0 / rate)

    print(f"Done. Sent={sent} OK={ok} Fail={fail}")
    return sent, ok, fail

if __name__ == "__main__":
    ap = argparse.ArgumentParser(description="Replay CSV as GET /img/{w}/{h} requests")
    ap.add_argument("--file", required=True, help="path to CSV")
    ap.add_argument("--base", default="http://127.0.0.1:8080", help="API base URL")
    ap.add_argument("--rate", type=float, default=10.0, help="requests per second; 0 to go as fast as possible")
    ap.add_argument("--dry-run", action="store_true")
    args = ap.parse_args()
    if args.rate == 0:
        args.rate = None
    replay(args.file, args.base, args.rate, args.dry_run)
