"""
Models used by the comparison scripts.

Includes a small torch MLP for tabular regression and a factory that also
provides scikit-learn baselines. All models expose `predict(data)` on
DataFrames, which is all shapimp needs from a model.
"""

import random

import numpy as np
import pandas as pd
import torch
import torch.nn as nn
import torch.nn.functional as F
from sklearn.ensemble import RandomForestRegressor
from sklearn.linear_model import LinearRegression
from typing import Optional


def fix_seed(seed: int):
    """Seed `random`, numpy and torch (including CUDA) for reproducible runs."""
    random.seed(seed)
    np.random.seed(seed)
    torch.manual_seed(seed)
    if torch.cuda.is_available():
        torch.cuda.manual_seed_all(seed)
        torch.backends.cudnn.deterministic = True
        torch.backends.cudnn.benchmark = False


class MLPRegressor(nn.Module):
    """Two-layer perceptron for regression on tabular data."""

    def __init__(self, num_features: int, hidden_dim: int = 64, dropout: float = 0.0,
                 seed: Optional[int] = None):
        super(MLPRegressor, self).__init__()
        if seed is not None:
            torch.manual_seed(seed)
        self.hidden = nn.Linear(num_features, hidden_dim)
        self.output = nn.Linear(hidden_dim, 1)
        self.dropout = dropout
        self.feature_names = None
        self.register_buffer('x_mean', torch.zeros(num_features))
        self.register_buffer('x_std', torch.ones(num_features))

    def forward(self, x):
        x = (x - self.x_mean) / self.x_std
        x = F.relu(self.hidden(x))
        x = F.dropout(x, p=self.dropout, training=self.training)
        return self.output(x).squeeze(-1)

    def _to_tensor(self, data, device='cpu'):
        if isinstance(data, pd.DataFrame):
            if self.feature_names is not None:
                data = data[self.feature_names]
            data = data.to_numpy()
        return torch.as_tensor(np.asarray(data, dtype=np.float32), device=device)

    def fit(self, X, y, num_epochs: int = 500, lr: float = 0.01,
            weight_decay: float = 0.0, device: str = 'cpu'):
        if isinstance(X, pd.DataFrame):
            self.feature_names = list(X.columns)
        model = self.to(device)
        x = self._to_tensor(X, device)
        target = torch.as_tensor(np.asarray(y, dtype=np.float32), device=device)

        self.x_mean.copy_(x.mean(dim=0))
        self.x_std.copy_(x.std(dim=0).clamp(min=1e-8))

        optimizer = torch.optim.Adam(self.parameters(), lr=lr, weight_decay=weight_decay)
        model.train()

        for epoch in range(num_epochs):
            optimizer.zero_grad()
            out = model(x)
            loss = F.mse_loss(out, target)
            loss.backward()
            optimizer.step()
        return self

    def predict(self, data, device: str = 'cpu') -> np.ndarray:
        model = self.to(device)
        model.eval()
        with torch.no_grad():
            out = model(self._to_tensor(data, device))
        return out.cpu().numpy()


def create_model(model_name: str, num_features: int, config: Optional[dict] = None, seed: int = 0):
    """
    Create an unfitted regression model.

    Args:
        model_name: 'mlp', 'linear' or 'forest'
        num_features: Number of input features
        config: Optional configuration dict with 'hidden_dim', 'dropout',
            'n_estimators'
        seed: Random seed for reproducibility

    Returns:
        Model with `fit(X, y)` and `predict(X)`
    """
    if config is None:
        config = {}

    if model_name.lower() == 'mlp':
        return MLPRegressor(num_features,
                            hidden_dim=config.get('hidden_dim', 64),
                            dropout=config.get('dropout', 0.0),
                            seed=seed)
    elif model_name.lower() == 'linear':
        return LinearRegression()
    elif model_name.lower() == 'forest':
        return RandomForestRegressor(n_estimators=config.get('n_estimators', 100),
                                     random_state=seed)
    else:
        raise ValueError(f"Unsupported model: {model_name}. Use 'mlp', 'linear' or 'forest'.")
