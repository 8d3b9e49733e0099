#!/usr/bin/env python3

import sys, os, os.path, datetime, argparse, multiprocessing, itertools

import cylinder_maze


def gen_maze( job ):
    index, options = job
    out_dir = options['out_dir']

    argv = [
        '--rows', options['rows'],
        '--cols', options['cols'],
        '--height', options['height'],
        '--circumference', options['circumference'],
        '--seed', index,                       # one seed per maze, repeatable
        '--maze-file', f'maze.{index:03d}',
        '--outer-file', f'maze.{index:03d}.outer',
        '--out-dir', out_dir,
        '--quiet',
    ]
    if options['hollow']:
        argv.append('--hollow')

    outfile = os.path.join(out_dir, f'maze.{index:03d}_whole.scad')
    started = datetime.datetime.now()
    status = cylinder_maze.main(list(map(str, argv)))
    elapsed = datetime.datetime.now() - started
    if status != 0:
        return outfile, None, elapsed
    info = os.stat(outfile)
    return outfile, info.st_size, elapsed


def main(argv):
    p = argparse.ArgumentParser(description='Generate a batch of seeded cylinder mazes')
    p.add_argument('--count', type=int, default=10)
    p.add_argument('--rows', type=int, default=10)
    p.add_argument('--cols', type=int, default=20)
    p.add_argument('--height', type=float, default=60.0)
    p.add_argument('--circumference', type=float, default=100.0)
    p.add_argument('--hollow', action='store_true')
    p.add_argument('--out-dir', dest='out_dir', default='output')
    p.add_argument('--jobs', type=int, default=None, help='Worker processes (default: cpu count)')
    args = p.parse_args(argv)

    if not os.path.isdir(args.out_dir):
        os.makedirs(args.out_dir)

    options = {
        'rows': args.rows,
        'cols': args.cols,
        'height': args.height,
        'circumference': args.circumference,
        'hollow': args.hollow,
        'out_dir': args.out_dir,
    }
    jobs = list(zip(range(args.count), itertools.repeat(options)))

    failed = 0
    with multiprocessing.Pool(args.jobs) as pool:
        for outfile, size, elapsed in pool.imap(gen_maze, jobs):
            if size is None:
                failed += 1
                print(f'{outfile}: FAILED', file=sys.stderr)
            else:
                print(f'{outfile}: {size/1024:.1f} KiB\n    {elapsed}')
            sys.stdout.flush()
    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main(sys.argv[1:]))
