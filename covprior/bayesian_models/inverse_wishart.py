'''
Author: Lucas Rath

Inverse Wishart distribution IW(nu, Psi) over symmetric positive definite p x p matrices.

It is the conjugate prior for the covariance matrix of a multivariate normal distribution:

    Sigma ~ IW(nu, Psi)
    x_k | Sigma ~ N(mu, Sigma),  k=1..N
    => Sigma | x ~ IW(nu + N, Psi + sum_k (x_k - mu)(x_k - mu).T)

Density:
    p(X) = |Psi|^(nu/2) / ( 2^(nu*p/2) * Gamma_p(nu/2) ) * |X|^(-(nu+p+1)/2) * exp( -tr(Psi @ X^-1)/2 )

Parameter validation can be turned off process-wide with `Control.check_distribution_parameters`
or per instance with `check_parameters=False`, in which case invalid parameters are accepted
and the results may be non-finite.

References:
- https://en.wikipedia.org/wiki/Inverse-Wishart_distribution
- Mardia, Kent and Bibby 1979, Multivariate Analysis
- O'Hagan and Forster 2004, Kendall's Advanced Theory of Statistics: Bayesian Inference. 2B
'''

import warnings
import numpy as np
from scipy import special
from typing import List

from covprior.utils.linalg import Cholesky
from covprior.utils.control import Control
from covprior.utils.exceptions import InvalidParameter, DimensionMismatch, DecompositionFailure
from covprior.bayesian_models.wishart import MatrixVariateSampler, BartlettWishartSampler


''' Multivariate Gamma function
=============================================================='''

def multivariate_gamma(a:float, p:int) -> float:
    ''' Gamma_p(a) = pi^(p(p-1)/4) * prod_{j=1..p} Gamma(a + (1-j)/2) '''
    gp = np.power(np.pi, p * (p - 1.) / 4.)
    for j in range(1, p+1):
        gp *= special.gamma(a + (1. - j) / 2.)
    return gp

def log_multivariate_gamma(a:float, p:int) -> float:
    return p * (p - 1.) / 4. * np.log(np.pi) + sum(special.gammaln(a + (1. - j) / 2.) for j in range(1, p+1))


''' Inverse Wishart
=============================================================='''

class InverseWishart():
    ''' Inverse Wishart distribution with degree of freedom nu and scale matrix Psi.

    Parameters are replaced only as a pair through `set_parameters` (the `degree_of_freedom`
    and `scale` setters route through it), which validates them and refreshes the cached
    Cholesky factorization of Psi before committing anything.
    With validation off, a Psi that is not positive definite is still accepted: the
    `DecompositionFailure` is raised by the first method that needs its factorization.

    Args:
        degree_of_freedom: nu > 0
        scale: Psi, p x p symmetric positive definite matrix
        random_source: numpy random generator used by `sample`. A default generator is
            created on first use if None.
        sampler: companion Wishart sampler. None: a `BartlettWishartSampler` following the
            current `check_parameters` at every draw.
        check_parameters: validate parameters. None: use `Control.check_distribution_parameters`

    Raises:
        InvalidParameter: if the parameters are invalid and validation is on
        DecompositionFailure: if Psi is not positive definite and validation is on
    '''
    def __init__(
            self,
            degree_of_freedom:float,
            scale:np.ndarray,
            random_source = None,
            sampler:MatrixVariateSampler = None,
            check_parameters:bool = None
        ):
        self._random = random_source
        self.sampler = sampler
        self.check_parameters = check_parameters
        self.set_parameters(degree_of_freedom, scale)

    def __repr__(self):
        return f'{self.__class__.__name__}(ν = {self._freedom}, Rows = {self._scale.shape[0]}, Columns = {self._scale.shape[-1]})'

    def __str__(self):
        return self.__repr__()

    ''' Parameters
    ------------------'''

    @staticmethod
    def is_valid_parameter_set(degree_of_freedom:float, scale:np.ndarray) -> bool:
        ''' True iff scale is square, its diagonal is strictly positive and degree_of_freedom > 0.
        Positive definiteness is not checked.
        '''
        scale = np.asarray(scale)
        if scale.ndim != 2 or scale.shape[0] != scale.shape[1]:
            return False
        if not np.all(np.diag(scale) > 0.):
            return False
        return degree_of_freedom > 0.

    def set_parameters(self, degree_of_freedom:float, scale:np.ndarray) -> 'InverseWishart':
        ''' Replace both parameters and recompute the Cholesky factor of the scale matrix.
        On failure the previous parameters are kept.
        '''
        check = Control.resolve(self.check_parameters)
        if check and not self.is_valid_parameter_set(degree_of_freedom, scale):
            raise InvalidParameter(
                f'invalid inverse Wishart parameters: degree_of_freedom={degree_of_freedom} must be > 0 '
                f'and scale must be square with positive diagonal, got shape {np.shape(scale)}'
            )
        scale = np.array(scale, dtype=float)
        try:
            chol = Cholesky(scale)
        except DecompositionFailure:
            if check:
                raise
            # resurfaces in the methods that need the factor
            chol = None
        self._freedom, self._scale, self._chol = float(degree_of_freedom), scale, chol
        return self

    @property
    def degree_of_freedom(self) -> float:
        return self._freedom

    @degree_of_freedom.setter
    def degree_of_freedom(self, value:float):
        self.set_parameters(value, self._scale)

    @property
    def scale(self) -> np.ndarray:
        return self._scale

    @scale.setter
    def scale(self, value:np.ndarray):
        self.set_parameters(self._freedom, value)

    @property
    def dim(self) -> int:
        return self._scale.shape[0]

    @property
    def random_source(self):
        if self._random is None:
            self._random = np.random.default_rng()
        return self._random

    @random_source.setter
    def random_source(self, value):
        self._random = value if value is not None else np.random.default_rng()

    @property
    def scale_cholesky(self) -> Cholesky:
        if self._chol is None:
            raise DecompositionFailure('scale matrix is not positive definite')
        return self._chol

    ''' Moments
    ------------------'''

    @property
    def mean(self) -> np.ndarray:
        ''' Psi / (nu - p - 1). Non-finite for nu = p + 1 '''
        with np.errstate(divide='ignore', invalid='ignore'):
            return self._scale * (np.float64(1.) / np.float64(self._freedom - self.dim - 1.))

    @property
    def mode(self) -> np.ndarray:
        with np.errstate(divide='ignore', invalid='ignore'):
            return self._scale * (np.float64(1.) / np.float64(self._freedom + self.dim + 1.))

    @property
    def variance(self) -> np.ndarray:
        ''' Element-wise variance (Mardia, Kent and Bibby 1979):

            Var[X_ij] = ( (nu-p+1) Psi_ij^2 + (nu-p-1) Psi_ii Psi_jj ) / ( (nu-p) (nu-p-1)^2 (nu-p-3) )
        '''
        nu, p, S = np.float64(self._freedom), self.dim, self._scale
        d = np.diag(S)
        num = (nu - p + 1.) * S**2 + (nu - p - 1.) * np.outer(d, d)
        den = (nu - p) * (nu - p - 1.)**2 * (nu - p - 3.)
        with np.errstate(divide='ignore', invalid='ignore'):
            return num / den

    ''' Density
    ------------------'''

    def _check_argument(self, x:np.ndarray) -> np.ndarray:
        x = np.asarray(x, dtype=float)
        if x.ndim != 2 or x.shape != self._scale.shape:
            raise DimensionMismatch(f'x must have the dimensions of the scale matrix {self._scale.shape}, got {x.shape}')
        return x

    def density(self, x:np.ndarray) -> float:
        ''' Probability density at the p x p positive definite matrix x.

        Raises:
            DimensionMismatch: x has not the same dimensions as the scale matrix
            DecompositionFailure: x is not positive definite
        '''
        x = self._check_argument(x)
        nu, p = self._freedom, self.dim

        chol = Cholesky(x)
        det_x = chol.determinant
        # tr(X^-1 @ Psi) without explicit inversion
        tr = np.trace(chol.solve(self._scale))

        return (
            np.power(det_x, -(nu + p + 1.) / 2.)
            * np.exp(-0.5 * tr)
            * np.power(self.scale_cholesky.determinant, nu / 2.)
            / np.power(2., nu * p / 2.)
            / multivariate_gamma(nu / 2., p)
        )

    def log_density(self, x:np.ndarray) -> float:
        ''' Logarithm of `density`, evaluated in log space '''
        x = self._check_argument(x)
        nu, p = self._freedom, self.dim

        chol = Cholesky(x)
        tr = np.trace(chol.solve(self._scale))
        return (
            - (nu + p + 1.) / 2. * chol.log_determinant
            - 0.5 * tr
            + nu / 2. * self.scale_cholesky.log_determinant
            - nu * p / 2. * np.log(2.)
            - log_multivariate_gamma(nu / 2., p)
        )

    ''' Sampling
    ------------------'''

    def sample(self) -> np.ndarray:
        ''' Draws a sample using the stored parameters, random source and sampler '''
        if not Control.resolve(self.check_parameters) and not self.is_valid_parameter_set(self._freedom, self._scale):
            warnings.warn(f'{self} is sampled with invalid parameters', RuntimeWarning)
        return self.sample_from(
            self.random_source, self._freedom, self._scale,
            sampler = self.sampler,
            check_parameters = self.check_parameters,
            scale_cholesky = self.scale_cholesky
        )

    def samples(self, n:int) -> List[np.ndarray]:
        assert n >= 0, 'number of samples must be non-negative'
        return [self.sample() for _ in range(n)]

    @staticmethod
    def sample_from(
            rng,
            degree_of_freedom:float,
            scale:np.ndarray,
            sampler:MatrixVariateSampler = None,
            check_parameters:bool = None,
            scale_cholesky:Cholesky = None
        ) -> np.ndarray:
        ''' Samples an inverse Wishart random matrix by sampling W ~ W(nu, Psi^-1) and returning W^-1.

        Args:
            rng: numpy random generator
            degree_of_freedom: nu
            scale: Psi
            sampler: companion Wishart sampler. Defaults to `BartlettWishartSampler`
            check_parameters: validate parameters. None: use `Control.check_distribution_parameters`
            scale_cholesky: precomputed Cholesky factorization of Psi

        Raises:
            InvalidParameter: if the parameters are invalid and validation is on
            DecompositionFailure: if Psi or the Wishart draw are not positive definite
        '''
        if Control.resolve(check_parameters) and not InverseWishart.is_valid_parameter_set(degree_of_freedom, scale):
            raise InvalidParameter(
                f'invalid inverse Wishart parameters: degree_of_freedom={degree_of_freedom} must be > 0 '
                f'and scale must be square with positive diagonal, got shape {np.shape(scale)}'
            )
        if sampler is None:
            sampler = BartlettWishartSampler(check_parameters=check_parameters)
        if scale_cholesky is None:
            scale_cholesky = Cholesky(scale)

        W = sampler(rng, degree_of_freedom, scale_cholesky.inverse())
        return Cholesky(W).inverse()
