import argparse
import sys
import os
import logging

# Ensure project root is in path so we can import 'maze_master' package
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from maze_master.algo.registry import GenerationAlgorithm, SolvingAlgorithm

GEN_CHOICES = [a.value for a in GenerationAlgorithm]
SOLVE_CHOICES = [a.value for a in SolvingAlgorithm]


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Maze Master: animated maze generation and solving")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Generate Command
    gen_parser = subparsers.add_parser("generate", help="Generate a new maze")
    gen_parser.add_argument("--rows", type=int, default=41, help="Maze rows (even values are rounded up)")
    gen_parser.add_argument("--cols", type=int, default=51, help="Maze columns (even values are rounded up)")
    gen_parser.add_argument("--algo", type=str, default="dfs", choices=GEN_CHOICES, help="Generation algorithm")
    gen_parser.add_argument("--solver", type=str, choices=SOLVE_CHOICES, help="Solve right after generating")
    gen_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    gen_parser.add_argument("--delay", type=int, default=None, help="Animation delay per step in ms")
    gen_parser.add_argument("--out", type=str, help="Output file path (optional)")
    gen_parser.add_argument("--compress", action="store_true", help="zlib-compress the output file")
    gen_parser.add_argument("--record-events", type=str, help="Save events to binary file")
    gen_parser.add_argument("--visual", action="store_true", help="Show visualization")
    gen_parser.add_argument("--print", action="store_true", help="Print the maze as text")

    # Solve Command
    solve_parser = subparsers.add_parser("solve", help="Solve an existing maze")
    solve_parser.add_argument("input_file", help="Path to maze file")
    solve_parser.add_argument("--algo", type=str, default="dfs", choices=SOLVE_CHOICES, help="Solver algorithm")
    solve_parser.add_argument("--delay", type=int, default=None, help="Animation delay per step in ms")
    solve_parser.add_argument("--out", type=str, help="Save the solved maze (optional)")
    solve_parser.add_argument("--record-events", type=str, help="Save solver events to binary file")
    solve_parser.add_argument("--visual", action="store_true", help="Show visualization")
    solve_parser.add_argument("--print", action="store_true", help="Print the maze as text")

    # Replay Command
    replay_parser = subparsers.add_parser("replay", help="Rebuild a maze from an event log")
    replay_parser.add_argument("event_file", help="Path to event log file")
    replay_parser.add_argument("--visual", action="store_true", help="Show the rebuilt maze")
    replay_parser.add_argument("--print", action="store_true", help="Print the maze as text")

    # Play Command
    play_parser = subparsers.add_parser("play", help="Interactive window (G generate, S solve, Space pause)")
    play_parser.add_argument("--rows", type=int, default=41, help="Maze rows")
    play_parser.add_argument("--cols", type=int, default=51, help="Maze columns")
    play_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    play_parser.add_argument("--delay", type=int, default=30, help="Animation delay per step in ms")

    return parser


def open_recorder(path, grid, logger):
    from maze_master.core.events import EventWriter
    writer = EventWriter(path)
    writer.write_header(grid.rows, grid.columns)
    # A loaded maze is logged as carved cells so the log replays on its own
    for r, row in enumerate(grid.snapshot()):
        for c, state in enumerate(row):
            if state != grid.WALL:
                writer.on_cell_changed(r, c, state)
    logger.info(f"Recording events to {path}...")
    return writer


def run_visual(controller, start):
    from maze_master.core.events import ObserverGroup
    from maze_master.viz.renderer import Renderer

    renderer = Renderer(controller)
    controller.set_observer(ObserverGroup(renderer, controller.observer))
    renderer.init_window()
    if start:
        start()
    renderer.run_loop()


def report(controller, args, logger):
    from maze_master.core.analysis import MazeAnalyzer
    stats = MazeAnalyzer.calculate_stats(controller.grid)
    logger.info(f"Stats: {stats}")
    if controller.solution_path:
        logger.info(f"Solution length: {len(controller.solution_path)}")
    if args.print:
        print(controller.grid)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger("maze_master")

    if args.command is None:
        parser.print_help()
        return

    logger.info(f"Running command: {args.command}")

    from maze_master.controller import MazeController

    if args.command == "generate":
        # Headless runs default to no animation delay
        delay = args.delay if args.delay is not None else (30 if args.visual else 0)
        controller = MazeController(args.rows, args.cols, delay_ms=delay, seed=args.seed)
        controller.set_generation_algorithm(args.algo)
        if args.solver:
            controller.set_solving_algorithm(args.solver)

        writer = None
        if args.record_events:
            writer = open_recorder(args.record_events, controller.grid, logger)
            controller.set_observer(writer)

        if args.visual:
            run_visual(controller, controller.generate_maze)
        else:
            controller.generate_maze()
            controller.wait()
            if args.solver:
                controller.solve_maze()
                controller.wait()

        report(controller, args, logger)

        if args.out:
            logger.info(f"Saving maze to {args.out}...")
            controller.save_maze(args.out, compress=args.compress)
            logger.info("Save complete.")

        if writer:
            writer.close()

    elif args.command == "solve":
        delay = args.delay if args.delay is not None else (30 if args.visual else 0)
        controller = MazeController(delay_ms=delay)
        logger.info(f"Loading {args.input_file}...")
        meta = controller.load_maze(args.input_file)
        logger.info(f"Loaded {controller.grid.rows}x{controller.grid.columns} maze. Meta: {meta}")
        controller.set_solving_algorithm(args.algo)

        writer = None
        if args.record_events:
            writer = open_recorder(args.record_events, controller.grid, logger)
            controller.set_observer(writer)

        logger.info(f"Solving with {args.algo.upper()} from {controller.grid.start} to {controller.grid.goal}...")
        if args.visual:
            run_visual(controller, controller.solve_maze)
        else:
            controller.solve_maze()
            controller.wait()

        report(controller, args, logger)
        if not controller.solution_path:
            logger.info("No solution found (or visualization closed early).")

        if args.out:
            controller.save_maze(args.out)

        if writer:
            print(f"Saved events to {args.record_events}")
            writer.close()

    elif args.command == "replay":
        logger.info(f"Replaying {args.event_file}...")
        from maze_master.core.events import EventReader, replay_events, EVT_PATH

        controller = MazeController()
        reader = EventReader(args.event_file)
        rows, cols = reader.read_header()
        logger.info(f"Log Header: {rows}x{cols}")
        controller.create_new_maze(rows, cols)

        count = 0
        for type_code, data in replay_events(reader, controller.grid):
            count += 1
            if type_code == EVT_PATH:
                controller.solution_path = list(data[0])
        reader.close()
        logger.info(f"Applied {count} events")

        if args.visual:
            run_visual(controller, None)
        report(controller, args, logger)

    elif args.command == "play":
        controller = MazeController(args.rows, args.cols, delay_ms=args.delay, seed=args.seed)
        run_visual(controller, None)


if __name__ == "__main__":
    main()
