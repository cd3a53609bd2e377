import argparse

from harmonic_hexmap import config
from harmonic_hexmap.rational import best_rational


def calculate_prototypes(complexity_weight=config.DEFAULT_COMPLEXITY_WEIGHT):
    print("Calculating harmonic prototypes for one octave of each EDO preset...")

    # For every step of every preset, find the simple ratio the lattice
    # would label it with. Unmatched steps print as '-'.
    summary = {}

    for edo, (name, _, _, _) in config.EDO_PRESETS.items():
        print(f"\n{name} (weight {complexity_weight}):")
        matched = 0
        total_error = 0.0

        for step in range(edo):
            match = best_rational(2.0 ** (step / edo), complexity_weight)
            if not match.matched:
                if edo <= 19:
                    print(f"  Step {step:3d}: -")
                continue

            matched += 1
            total_error += abs(match.error_cents)
            # Larger EDOs print only the 7-limit hits
            if edo <= 19 or match.limit <= 7:
                print(f"  Step {step:3d}: {match.label:>7} "
                      f"(Err: {match.error_cents:+6.2f}c, limit {match.limit})")

        mean_error = total_error / matched if matched else 0.0
        print(f"  {matched}/{edo} steps matched, mean |error| {mean_error:.2f}c")
        summary[edo] = (matched, mean_error)

    return summary

if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--complexity", type=float,
                        default=config.DEFAULT_COMPLEXITY_WEIGHT,
                        help="Complexity weight for rational matching")
    args = parser.parse_args()
    calculate_prototypes(args.complexity)
