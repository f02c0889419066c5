# qsnake/main.py
import argparse

from qsnake.config import AppConfig


def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="qsnake")
    p.add_argument("mode", choices=["train", "play", "plot"])
    p.add_argument("--grid-size", type=int, default=20)
    p.add_argument("--lr", type=float, default=0.1)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--episodes", type=int, default=2000)
    p.add_argument("--speed", type=float, default=5.0)
    p.add_argument("--manual", action="store_true", help="start in manual mode (play)")
    p.add_argument("--train", action="store_true", help="start with training on (play)")
    p.add_argument("--log-dir", default="runs/qsnake")
    p.add_argument("--no-log", action="store_true")
    p.add_argument("--print-every", type=int, default=100)
    return p.parse_args(argv)


def config_from_args(args) -> AppConfig:
    return AppConfig().with_(
        grid_size=args.grid_size,
        learning_rate=args.lr,
        seed=args.seed,
        episodes=args.episodes,
        game_speed=args.speed,
        mode="manual" if args.manual else "ai",
        training=args.train,
        log_dir=None if args.no_log else args.log_dir,
        print_every=args.print_every,
    )


def main(argv=None):
    args = parse_args(argv)
    cfg = config_from_args(args)
    if args.mode == "train":
        from qsnake.runners.run_train import main as train
        train(cfg)
    elif args.mode == "play":
        from qsnake.runners.run_play import main as play
        play(cfg)
    elif args.mode == "plot":
        from qsnake.tools.plot_scores import main as plot
        plot([f"{args.log_dir}/logs.csv"])


if __name__ == "__main__":
    main()
