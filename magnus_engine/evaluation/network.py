"""
Residual value network for the neural evaluation tier.

Components:
    - Conv2d + BatchNorm2d + ReLU stem over the 12 piece planes
    - A short tower of residual blocks (x + f(x))
    - Value head: 1x1 conv, flatten, two dense layers, tanh to [-1, 1]

The network consumes exactly what encode_board() produces: a (N, 12, 8, 8)
float32 batch. Its scalar output is read by NeuralEvaluator, which scales
it to pawns.
"""

import torch
import torch.nn as nn
import torch.nn.functional as F

from magnus_engine.board.representation import NUM_CHANNELS


class ResidualBlock(nn.Module):
    """Two 3x3 convolutions with a skip connection.

    Architecture:
        x -> Conv -> BN -> ReLU -> Conv -> BN -> (+x) -> ReLU
    """

    def __init__(self, channels: int):
        super().__init__()
        self.conv1 = nn.Conv2d(channels, channels, kernel_size=3, padding=1, bias=False)
        self.bn1 = nn.BatchNorm2d(channels)
        self.conv2 = nn.Conv2d(channels, channels, kernel_size=3, padding=1, bias=False)
        self.bn2 = nn.BatchNorm2d(channels)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        out = F.relu(self.bn1(self.conv1(x)))
        out = self.bn2(self.conv2(out))
        return F.relu(out + x)


class ValueNet(nn.Module):
    """Position value network.

    Output is a scalar per position in [-1, 1]:
        +1.0 = White winning, 0.0 = equal, -1.0 = Black winning
    """

    def __init__(self, blocks: int = 4, channels: int = 64, hidden: int = 128):
        """
        Args:
            blocks: Number of residual blocks (>= 1)
            channels: Filters per convolution
            hidden: Width of the dense layer in the value head

        Raises:
            ValueError: If any size is not positive
        """
        super().__init__()

        if blocks < 1:
            raise ValueError(f"blocks must be at least 1, got {blocks}")
        if channels < 1 or hidden < 1:
            raise ValueError(f"channels and hidden must be positive, got {channels}, {hidden}")

        self.blocks = blocks
        self.channels = channels
        self.hidden = hidden

        self.stem = nn.Sequential(
            nn.Conv2d(NUM_CHANNELS, channels, kernel_size=3, padding=1, bias=False),
            nn.BatchNorm2d(channels),
            nn.ReLU(inplace=True),
        )
        self.tower = nn.Sequential(*[ResidualBlock(channels) for _ in range(blocks)])

        self.value_conv = nn.Conv2d(channels, 8, kernel_size=1, bias=False)
        self.value_bn = nn.BatchNorm2d(8)
        self.value_fc1 = nn.Linear(8 * 8 * 8, hidden)
        self.value_fc2 = nn.Linear(hidden, 1)

    def forward(self, x: torch.Tensor) -> torch.Tensor:
        """
        Args:
            x: Encoded boards (N, 12, 8, 8)

        Returns:
            Scores (N,) in range [-1, 1]
        """
        x = self.tower(self.stem(x))

        x = F.relu(self.value_bn(self.value_conv(x)))
        x = x.flatten(start_dim=1)
        x = F.relu(self.value_fc1(x))
        return torch.tanh(self.value_fc2(x)).squeeze(-1)

    def config(self) -> dict:
        """Constructor arguments, stored next to the weights in checkpoints."""
        return {"blocks": self.blocks, "channels": self.channels, "hidden": self.hidden}

    def count_parameters(self) -> int:
        return sum(p.numel() for p in self.parameters() if p.requires_grad)
