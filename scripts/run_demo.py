#!/usr/bin/env python3
"""
Quick demonstration of Shapley feature importance on a small dataset.

Fits a model on the scikit-learn diabetes data, then compares classic
permutation feature importance with Shapley importance using both the
generalization error and the permutation importance value function.

Usage:
    python scripts/run_demo.py --model linear --num_obs 30 --n_shapley_perm 50
"""

import argparse
import os
import sys
import time

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sklearn.datasets import load_diabetes
from sklearn.model_selection import train_test_split

from shapimp.evaluation import compare_importance, importance_table
from shapimp.valuation import shapley_importance
from shapimp.models import create_model, fix_seed
from shapimp.utils import load_config, print_config, save_results


BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def main():
    parser = argparse.ArgumentParser(description='Shapley feature importance demo')
    parser.add_argument('--config', type=str,
                        default=os.path.join(BASE_DIR, 'configs', 'default.yaml'),
                        help='YAML run configuration')
    parser.add_argument('--model', type=str, default='linear',
                        choices=['linear', 'forest', 'mlp'],
                        help='Model to explain (default: linear)')
    parser.add_argument('--mode', type=str, default='compare',
                        choices=['compare', 'shapley'],
                        help='Compare PFI and both Shapley variants, or run Shapley '
                             'importance with the configured value function only')
    parser.add_argument('--features', nargs='+', default=None,
                        help='Features to explain (default: all)')
    parser.add_argument('--num_obs', type=int, default=30,
                        help='Test observations used for importance (default: 30)')
    parser.add_argument('--n_shapley_perm', type=int, default=None,
                        help='Number of permutations (overrides config)')
    parser.add_argument('--bound_size', type=int, default=None,
                        help='Bound on coalition size (overrides config)')
    parser.add_argument('--n_jobs', type=int, default=None,
                        help='Parallel coalition evaluations (overrides config)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (overrides config)')
    parser.add_argument('--output', type=str, default=None,
                        help='Optional path to save results (.json or .pkl)')
    args = parser.parse_args()

    config = load_config(args.config, overrides={
        'n_shapley_perm': args.n_shapley_perm,
        'bound_size': args.bound_size,
        'n_jobs': args.n_jobs,
        'seed': args.seed,
    })

    print("\n" + "="*60)
    print(" Shapley Feature Importance Demo")
    print("="*60)
    print_config(dict(config, model=args.model, num_obs=args.num_obs), "Configuration")

    fix_seed(config['seed'])

    # Step 1: Load data and fit model
    print("Step 1: Loading data and fitting model...")
    start = time.time()

    data = load_diabetes(as_frame=True).frame
    train, test = train_test_split(data, test_size=args.num_obs, random_state=config['seed'])
    feature_names = [c for c in data.columns if c != 'target']

    model = create_model(args.model, num_features=len(feature_names), seed=config['seed'])
    model.fit(train[feature_names], train['target'])
    print(f"  Done in {time.time() - start:.1f}s\n")

    # Step 2: Importance
    print("Step 2: Computing importance...")
    start = time.time()

    features = args.features or feature_names
    test = test.reset_index(drop=True)
    shapley_args = dict(
        local=config['local'],
        bound_size=config['bound_size'],
        n_shapley_perm=config['n_shapley_perm'],
        n_jobs=config['n_jobs'],
        backend=config['backend'],
        random_state=config['seed'],
        strict=config['strict'],
        verbose=config['verbose'],
    )

    if args.mode == 'shapley':
        result = shapley_importance(model, test, features, 'target', config['measures'],
                                    value_function=config['value_function'], **shapley_args)
        print(f"  Done in {time.time() - start:.1f}s\n")

        print("Step 3: Results")
        result.summary()
        print("\nUncertainty (standard error):")
        print(result.shapley_uncertainty.to_string(index=False))
        results = {
            'shapley_value': result.shapley_value,
            'shapley_uncertainty': result.shapley_uncertainty,
        }
    else:
        comparison = compare_importance(model, test, 'target', config['measures'], features,
                                        **shapley_args)
        print(f"  Done in {time.time() - start:.1f}s\n")

        print("Step 3: Results")
        print("\nShapley importance (GE value function):")
        print(comparison['shapley_ge'])
        print("\nShapley importance (PFI value function):")
        print(comparison['shapley_pfi'])

        if not config['local']:
            for measure_id in config['measures']:
                print(f"\nComparison ({measure_id}):")
                print(importance_table(comparison, measure_id).to_string(index=False))
        results = {
            'shapley_ge': comparison['shapley_ge'].shapley_value,
            'shapley_ge_uncertainty': comparison['shapley_ge'].shapley_uncertainty,
            'shapley_pfi': comparison['shapley_pfi'].shapley_value,
            'shapley_pfi_uncertainty': comparison['shapley_pfi'].shapley_uncertainty,
        }

    if args.output:
        save_results(dict(results, config=config, model=args.model), args.output)


if __name__ == '__main__':
    main()
