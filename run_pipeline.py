"""
Run the cycle pipeline on synthetic data (or pass sensor CSV paths).
Usage:
  python run_pipeline.py
  python run_pipeline.py --accel-csv chest.csv --gyro-csv arm.csv --out XC_skiing_with_cycles
  python run_pipeline.py --accel-csv chest.csv --gyro-csv arm.csv --video run.mp4 --no-plot
"""

import argparse
import logging
import sys


def main():
    parser = argparse.ArgumentParser(description="XC skiing IMU cycle detection and session export")
    parser.add_argument("--accel-csv", type=str, default=None, help="Chest accelerometer CSV. If omitted, use synthetic data.")
    parser.add_argument("--gyro-csv", type=str, default=None, help="Arm gyroscope CSV")
    parser.add_argument("--time-unit", choices=["s", "ms"], default=None, help="Unit of the CSV time column (inferred if omitted)")
    parser.add_argument("--video", type=str, default=None, help="Video file to reference in the session")
    parser.add_argument("--out", type=str, default=None, help="Write the session to this directory")
    parser.add_argument("--cycles-out", type=str, default=None, help="Save per-cycle table to this CSV path")
    parser.add_argument("--no-plot", action="store_true", help="Skip showing plots (save only)")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    from pipeline import run_pipeline

    if bool(args.accel_csv) != bool(args.gyro_csv):
        parser.error("--accel-csv and --gyro-csv must be given together")

    if args.accel_csv:
        result = run_pipeline(
            accel_csv=args.accel_csv,
            gyro_csv=args.gyro_csv,
            time_unit=args.time_unit,
            video_path=args.video,
            out_dir=args.out,
            make_figures=not args.no_plot,
        )
    else:
        from synthetic_data import generate_synthetic_xc_imu
        import config
        print("No CSV provided. Generating synthetic XC skiing IMU data (DIA / TCK / DP / DIA)...")
        t, accel, gyro = generate_synthetic_xc_imu(sample_rate_hz=config.DEFAULT_SAMPLE_RATE_HZ, seed=42)
        result = run_pipeline(
            accel=accel,
            accel_time=t,
            gyro=gyro,
            gyro_time=t,
            video_path=args.video,
            out_dir=args.out,
            make_figures=not args.no_plot,
        )

    df = result["df_cycles"]
    print(f"Detected {len(result['peaks'])} peaks, {len(df)} cycles ({result['cycles_per_min']:.1f} cycles/min)")
    print(f"Annotations: {len(result['annotations'])}")
    if len(df) > 0:
        print(df[["cycle", "t_start_s", "t_end_s", "duration_s", "cycles_per_min", "indication"]].head(10).to_string())
    if result["session_dir"] is not None:
        print(f"Saved session to {result['session_dir']}")

    if args.cycles_out and len(df) > 0:
        df.to_csv(args.cycles_out, index=False)
        print(f"Saved cycles to {args.cycles_out}")

    if not args.no_plot and result["figures"]:
        import matplotlib.pyplot as plt
        for i, fig in enumerate(result["figures"]):
            fig.savefig(f"cycles_fig_{i+1}.png", dpi=120)
            print(f"Saved cycles_fig_{i+1}.png")
        plt.show()

    return 0


if __name__ == "__main__":
    sys.exit(main())
