'''
Author: Lucas Rath

Samplers for the Wishart distribution W(nu, V): the law of sum_k x_k x_k.T with
x_k ~ N(0, V), generalized to real degrees of freedom nu > p-1.

These are the companion samplers of the inverse Wishart distribution: if W ~ W(nu, Psi^-1)
then W^-1 ~ IW(nu, Psi).

References:
- Bartlett 1933, On the theory of statistical regression
- Smith and Hocking 1972, Algorithm AS 53: Wishart Variate Generator
'''

import abc
import warnings
import numpy as np
import torch

from covprior.utils.linalg import Cholesky
from covprior.utils.control import Control
from covprior.utils.exceptions import InvalidParameter


class MatrixVariateSampler(abc.ABC):
    ''' Draws a symmetric positive definite matrix given a random generator, the degree of
    freedom and a positive definite scale matrix.
    '''
    @abc.abstractmethod
    def sample(self, rng, degree_of_freedom:float, scale:np.ndarray) -> np.ndarray:
        pass

    def __call__(self, rng, degree_of_freedom:float, scale:np.ndarray) -> np.ndarray:
        return self.sample(rng, degree_of_freedom, scale)

    def __repr__(self):
        return f'{self.__class__.__name__}()'


def is_valid_wishart_parameter_set(degree_of_freedom:float, scale:np.ndarray) -> bool:
    ''' The Bartlett decomposition needs chi-square variates with nu - i > 0 degrees of freedom, i=0..p-1 '''
    scale = np.asarray(scale)
    if scale.ndim != 2 or scale.shape[0] != scale.shape[1]:
        return False
    if not np.all(np.diag(scale) > 0.):
        return False
    return degree_of_freedom > scale.shape[0] - 1.


class BartlettWishartSampler(MatrixVariateSampler):
    ''' Wishart sampler based on the Bartlett decomposition:

        W = (L @ A) @ (L @ A).T,    V = L @ L.T

    with A lower triangular,
        A[i,i] ~ sqrt( chi2(nu - i) ),  i = 0..p-1
        A[i,j] ~ N(0,1),                j < i

    Random variates are drawn row by row: first the diagonal entry and then the i entries
    below the diagonal. Both `np.random.Generator` and `np.random.RandomState` are supported.
    '''
    def __init__(self, check_parameters:bool=None):
        self.check_parameters = check_parameters

    @staticmethod
    def bartlett_factor(rng, degree_of_freedom:float, p:int) -> np.ndarray:
        A = np.zeros((p,p))
        for i in range(p):
            A[i,i] = np.sqrt(rng.chisquare(degree_of_freedom - i))
            A[i,:i] = rng.standard_normal(i)
        return A

    def sample(self, rng, degree_of_freedom:float, scale:np.ndarray) -> np.ndarray:
        scale = np.asarray(scale, dtype=float)
        if Control.resolve(self.check_parameters) and not is_valid_wishart_parameter_set(degree_of_freedom, scale):
            raise InvalidParameter(
                f'invalid Wishart parameters: degree_of_freedom={degree_of_freedom} must be > p-1 '
                f'and scale must be square with positive diagonal, got shape {scale.shape}'
            )
        LA = Cholesky(scale).factor @ self.bartlett_factor(rng, degree_of_freedom, len(scale))
        return LA @ LA.T


class TorchWishartSampler(MatrixVariateSampler):
    ''' Wishart sampler delegating to `torch.distributions.Wishart`.

    The torch random state is seeded from `rng` inside `torch.random.fork_rng`, such that the
    draws are reproducible given the numpy generator and the global torch state is not altered.
    Every call makes exactly one Bartlett draw, without torch's singular-sample correction.
    '''
    def __init__(self, dtype=torch.float64, check_parameters:bool=None):
        self.dtype = dtype
        self.check_parameters = check_parameters

    @staticmethod
    def draw_seed(rng) -> int:
        if hasattr(rng, 'integers'):
            return int(rng.integers(0, 2**62))
        return int(rng.randint(0, 2**31 - 1))     # legacy RandomState

    def sample(self, rng, degree_of_freedom:float, scale:np.ndarray) -> np.ndarray:
        scale = np.asarray(scale, dtype=float)
        if Control.resolve(self.check_parameters) and not is_valid_wishart_parameter_set(degree_of_freedom, scale):
            raise InvalidParameter(
                f'invalid Wishart parameters: degree_of_freedom={degree_of_freedom} must be > p-1 '
                f'and scale must be square with positive diagonal, got shape {scale.shape}'
            )
        seed = self.draw_seed(rng)
        with torch.random.fork_rng(devices=[]), torch.no_grad(), warnings.catch_warnings():
            # single draw: singular samples are not redrawn, they fail when inverted
            warnings.filterwarnings('ignore', message='Singular sample detected', category=UserWarning)
            torch.manual_seed(seed)
            W = torch.distributions.Wishart(
                df = torch.tensor(degree_of_freedom, dtype=self.dtype),
                scale_tril = torch.as_tensor(Cholesky(scale).factor, dtype=self.dtype),
                validate_args = False
            ).rsample(max_try_correction=0)
        return W.numpy().astype(float)
