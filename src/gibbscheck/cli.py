#!/usr/bin/env python
"""gibbscheck command-line interface."""

import argparse
import sys
from pathlib import Path

from gibbscheck.experiments import EXPERIMENTS


def _load(args):
    from gibbscheck.config import default_config, load_config

    if args.config is None:
        return default_config()
    return load_config(args.config)


def cmd_new_config(args):
    """Write a configuration template."""
    from gibbscheck.config import write_config_template

    try:
        path = write_config_template(args.path)
    except FileExistsError as e:
        print(f"Error: {e}")
        return 1
    print(f"Config template written to: {path}")
    return 0


def cmd_run(args):
    """Run Gibbs experiments and compare against exact enumeration."""
    from gibbscheck.config import make_generator
    from gibbscheck.experiments import run_experiment
    from gibbscheck.report import REPORT_FILENAMES, write_report
    from gibbscheck.run_utils import (
        RunLogger,
        create_run,
        get_run_paths,
        save_metrics,
        save_plots,
        save_run_config,
    )

    try:
        cfg = _load(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    output_dir = Path(args.output or cfg["output"]["dir"])
    run_dir = create_run(output_dir, args.name)
    paths = get_run_paths(run_dir)
    if args.config is not None:
        save_run_config(run_dir, args.config)

    kinds = list(EXPERIMENTS) if args.experiment == "all" else [args.experiment]
    plots = cfg["output"].get("plots", True) and not args.no_plots
    seed = args.seed if args.seed is not None else cfg.get("seed")

    all_metrics = {}
    with RunLogger(paths["log"]):
        generator, seed = make_generator(seed)
        model_cfg = cfg["model"]

        print(f"Starting run: {run_dir.name}")
        print(f"Seed: {seed}")
        print(f"Model: n_visible={model_cfg['n_visible']}, n_hidden={model_cfg['n_hidden']}")
        print("=" * 60)

        for kind in kinds:
            exp_cfg = cfg["experiments"][kind]
            n_draws = args.draws if args.draws is not None else exp_cfg["n_draws"]
            k = args.k if args.k is not None else exp_cfg.get("k", 10)

            try:
                result = run_experiment(
                    kind,
                    n_visible=model_cfg["n_visible"],
                    n_hidden=model_cfg["n_hidden"],
                    n_draws=n_draws,
                    k=k,
                    generator=generator,
                    progress=not args.quiet,
                )
            except (ValueError, FloatingPointError, OverflowError) as e:
                print(f"Error: {e}")
                return 1

            report_path = write_report(result, run_dir / REPORT_FILENAMES[kind])
            metrics = result.metrics()
            all_metrics[kind] = metrics

            print(f"[{kind}] draws={n_draws:,} observed={metrics['n_observed']}/{metrics['n_states']} "
                  f"Z={metrics['partition']:.6g} TV={metrics['tv_distance']:.6f}")
            print(f"[{kind}] report: {report_path}")

            if plots:
                plot_path = save_plots(result, paths["plots"])
                if plot_path is not None:
                    print(f"[{kind}] plot: {plot_path}")

        all_metrics["seed"] = seed
        save_metrics(all_metrics, paths["metrics"])

        print("\n" + "=" * 60)
        print("RUN COMPLETE")
        print("=" * 60)
        print(f"Run directory: {run_dir}")

    return 0


def cmd_exact(args):
    """Print the exact distribution of a freshly drawn model."""
    from gibbscheck.config import make_generator
    from gibbscheck.exact import ExactEnumerator
    from gibbscheck.model import RBM

    try:
        cfg = _load(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    seed = args.seed if args.seed is not None else cfg.get("seed")
    generator, seed = make_generator(seed)
    model_cfg = cfg["model"]

    try:
        model = RBM(model_cfg["n_visible"], model_cfg["n_hidden"], generator=generator)
        enumerator = ExactEnumerator(model)
        if args.experiment == "hidden":
            print(f"Frozen visible: {model.visible_string()}")
            dist = enumerator.hidden_distribution()
        elif args.experiment == "visible":
            print(f"Frozen hidden: {model.hidden_string()}")
            dist = enumerator.visible_distribution()
        else:
            dist = enumerator.joint_distribution()
    except (ValueError, FloatingPointError, OverflowError) as e:
        print(f"Error: {e}")
        return 1

    print(f"Seed: {seed}")
    print(f"Z = {dist.partition!r}")
    for key, p in dist.as_dict().items():
        print(f"{key} {p:.8f}")
    return 0


def cmd_list_runs(args):
    """List all runs in an output directory."""
    from gibbscheck.run_utils import list_runs

    output_dir = Path(args.output)
    runs = list_runs(output_dir)

    if not runs:
        print(f"No runs found in: {output_dir}")
        return 0

    print(f"Runs in {output_dir}:")
    print("-" * 40)
    for run in runs:
        print(f"  {run.name}")

    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="gibbscheck",
        description="gibbscheck - Gibbs sampling vs exact enumeration for small RBMs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # new_config command
    new_cfg_parser = subparsers.add_parser(
        "new_config",
        help="Write a configuration template",
    )
    new_cfg_parser.add_argument(
        "path",
        type=str,
        help="Path of the config file to create",
    )

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run Gibbs experiments",
    )
    run_parser.add_argument(
        "--experiment", "-e",
        choices=list(EXPERIMENTS) + ["all"],
        default="all",
        help="Which experiment to run",
    )
    run_parser.add_argument("--config", "-c", type=str, default=None, help="Path to config file")
    run_parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed")
    run_parser.add_argument("--draws", "-d", type=int, default=None, help="Override number of draws")
    run_parser.add_argument("--k", type=int, default=None, help="Override sweeps per joint draw")
    run_parser.add_argument("--output", "-o", type=str, default=None, help="Output directory")
    run_parser.add_argument("--name", "-n", type=str, default=None, help="Optional name suffix for the run")
    run_parser.add_argument("--no-plots", action="store_true", help="Skip comparison plots")
    run_parser.add_argument("--quiet", "-q", action="store_true", help="Hide progress bars")

    # exact command
    exact_parser = subparsers.add_parser(
        "exact",
        help="Print the exact distribution of a random model",
    )
    exact_parser.add_argument(
        "--experiment", "-e",
        choices=list(EXPERIMENTS),
        default="joint",
        help="Which distribution to enumerate",
    )
    exact_parser.add_argument("--config", "-c", type=str, default=None, help="Path to config file")
    exact_parser.add_argument("--seed", "-s", type=int, default=None, help="Random seed")

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List runs in an output directory",
    )
    list_parser.add_argument(
        "--output", "-o",
        type=str,
        default="output",
        help="Path to output directory",
    )

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "new_config":
        return cmd_new_config(args)
    elif args.command == "run":
        return cmd_run(args)
    elif args.command == "exact":
        return cmd_exact(args)
    elif args.command == "list":
        return cmd_list_runs(args)

    return 0


if __name__ == "__main__":
    sys.exit(main())
